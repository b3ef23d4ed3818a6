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
Package implementing ovfpatch, the OVF appliance device-removal tool.

Utility modules
---------------
.. autosummary::
  :toctree:

  ovfpatch.data_validation
  ovfpatch.fetch
  ovfpatch.logging_
  ovfpatch.manifest
  ovfpatch.package
  ovfpatch.patcher
  ovfpatch.xml_file

Sub-packages
------------
.. autosummary::
  :toctree:

  ovfpatch.commands
  ovfpatch.ui

.. note::
  The hierarchy of permissible imports between sub-packages is as follows::

      ovfpatch.ui
         |
         +---> ovfpatch.commands
                  |
                  +---> ovfpatch.package, ovfpatch.fetch
                           |
                           +---> ovfpatch.patcher, ovfpatch.manifest
                                    |
                                    +---> ovfpatch.xml_file

  None of the library modules may ``import ovfpatch.ui``.
"""

import logging

# VerboseLogger adds a log level 'verbose' between 'info' and 'debug'.
# This lets us be a bit more fine-grained in our logging verbosity.
from verboselogs import VerboseLogger

logging.setLoggerClass(VerboseLogger)
logging.captureWarnings(True)

__version__ = "1.0.0"

__version_long__ = (
    """ovfpatch, version """ + __version__ +
    """\nCopyright (C) 2026 the ovfpatch project developers."""
)
