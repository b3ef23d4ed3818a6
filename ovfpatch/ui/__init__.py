# October 2026
# Copyright (c) 2026 the ovfpatch project developers.
# See the COPYRIGHT.txt file at the top-level directory of this distribution.
#
# This file is part of the ovfpatch project.
# It is subject to the license terms in the LICENSE.txt file found in the
# top-level directory of this distribution. No part of ovfpatch, including
# this file, may be copied, modified, propagated, or distributed except
# according to the terms contained in the LICENSE.txt file.

"""User interaction for ovfpatch commands.

API
---

.. autosummary::
  :nosignatures:

  UI

UI modules
----------

.. autosummary::
  :toctree:

  ovfpatch.ui.ui
  ovfpatch.ui.cli
"""

from .ui import UI

__all__ = ('UI',)
