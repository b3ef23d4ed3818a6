# October 2026
# Copyright (c) 2026 the ovfpatch project developers.
# See the COPYRIGHT.txt file at the top-level directory of this distribution.
#
# This file is part of the ovfpatch project.
# It is subject to the license terms in the LICENSE.txt file found in the
# top-level directory of this distribution. No part of ovfpatch, including
# this file, may be copied, modified, propagated, or distributed except
# according to the terms contained in the LICENSE.txt file.

"""
Package describing the operations ovfpatch can perform on an appliance.

API
---

.. autosummary::
  :nosignatures:

  Command
  PatchCommand

Command modules
---------------

.. autosummary::
  :toctree:

  ovfpatch.commands.fetch
  ovfpatch.commands.pack
  ovfpatch.commands.prepare
  ovfpatch.commands.remove_devices
  ovfpatch.commands.unpack
  ovfpatch.commands.update_manifest
"""

from .command import command_classes, Command, PatchCommand

# flake8: noqa: F401
from .prepare import Prepare
from .fetch import Fetch
from .unpack import Unpack
from .remove_devices import RemoveDevices
from .update_manifest import UpdateManifest
from .pack import Pack

__all__ = (
    'command_classes',
    'Command',
    'PatchCommand',
)
