#!/usr/bin/env python
#
# remove_devices.py - Implements "remove-devices" sub-command
#
# October 2026
# Copyright (c) 2026 the ovfpatch project developers.
# See the COPYRIGHT.txt file at the top-level directory of this distribution.
#
# This file is part of the ovfpatch project.
# It is subject to the license terms in the LICENSE.txt file found in the
# top-level directory of this distribution. No part of ovfpatch, including
# this file, may be copied, modified, propagated, or distributed except
# according to the terms contained in the LICENSE.txt file.

"""Module for removing device items from an unpacked OVF package.

**Classes**

.. autosummary::
  :nosignatures:

  RemoveDevices
"""

import argparse
import logging
import os.path

from ovfpatch.data_validation import InvalidInputError
from ovfpatch.package import PackageDirectory
from .command import command_classes, PatchCommand

logger = logging.getLogger(__name__)


class RemoveDevices(PatchCommand):
    """Remove device items of one CIM class from a package's descriptor.

    Inherited attributes:
    :attr:`~Command.ui`,
    :attr:`~PatchCommand.resource_type`,
    :attr:`~PatchCommand.method`,
    :attr:`~PatchCommand.update_manifest`

    Attributes:
    :attr:`package_dir`,
    :attr:`first_descriptor`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        super(RemoveDevices, self).__init__(ui)
        self._package_dir = None
        self.first_descriptor = False
        """If several descriptors exist, use the first instead of failing."""

    @property
    def package_dir(self):
        """Directory holding the unpacked OVF package to patch."""
        return self._package_dir

    @package_dir.setter
    def package_dir(self, value):
        if not os.path.isdir(value):
            raise InvalidInputError("Specified package directory {0} does"
                                    " not exist!".format(value))
        self._package_dir = value

    def ready_to_run(self):
        """Check whether the module is ready to :meth:`run`.

        Returns:
          tuple: ``(True, ready_message)`` or ``(False, reason_why_not)``
        """
        if self.package_dir is None:
            return False, "PACKAGE_DIR is a mandatory argument!"
        return super(RemoveDevices, self).ready_to_run()

    def run(self):
        """Do the actual work of this command.

        Raises:
          InvalidInputError: if :meth:`ready_to_run` reports ``False``
        """
        super(RemoveDevices, self).run()

        package = PackageDirectory(self.package_dir,
                                   strict=not self.first_descriptor)
        self.result = package.patch(self.resource_type, self.method,
                                    update_manifest=self.update_manifest,
                                    ignore_digest_errors=True)

    def create_subparser(self):
        """Create 'remove-devices' CLI subparser."""
        parser = self.ui.add_subparser(
            'remove-devices',
            aliases=['remove-sound'],
            help="""Remove device items (by default, sound cards) from"""
            """ an unpacked OVF package""",
            usage=self.ui.fill_usage("remove-devices", [
                "PACKAGE_DIR [-t N] [-m {auto,xml,text}] [--no-manifest]"
                " [--first-descriptor]",
            ]),
            description="""
Remove every virtual hardware Item with the given CIM ResourceType from the
OVF descriptor in PACKAGE_DIR, then refresh the descriptor's entry in the
package manifest (.mf) so that the package still verifies.""",
            epilog=self.ui.fill_examples([
                ("Remove the sound card from the package unpacked in"
                 " 'appliance-ova'.",
                 'ovfpatch remove-devices appliance-ova'),
                ("Remove all USB controllers (ResourceType 23), editing the"
                 " descriptor line by line.",
                 'ovfpatch remove-devices appliance-ova -t 23 -m text'),
            ]),
            formatter_class=argparse.RawDescriptionHelpFormatter)

        self.add_patch_arguments(parser)
        parser.add_argument(
            '--first-descriptor', action='store_true', default=None,
            help="""If the package has several .ovf files, patch the"""
            """ first one instead of failing""")
        parser.add_argument('PACKAGE_DIR',
                            help="""Directory holding the unpacked package""")
        parser.set_defaults(instance=self)


command_classes.append(RemoveDevices)
