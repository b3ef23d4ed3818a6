#!/usr/bin/env python
#
# unpack.py - Implements "unpack" sub-command
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

"""Implements "unpack" subcommand."""

import logging
import os.path

from ovfpatch.data_validation import InvalidInputError
from ovfpatch.package import unpack
from .command import command_classes, Command

logger = logging.getLogger(__name__)


class Unpack(Command):
    """Extract an OVA into a package directory.

    Inherited attributes:
    :attr:`~Command.ui`

    Attributes:
    :attr:`ova`,
    :attr:`directory`,
    :attr:`overwrite`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        super(Unpack, self).__init__(ui)
        self._ova = None
        self.directory = None
        """Directory to extract into."""
        self.overwrite = False
        """Re-extract even if :attr:`directory` already has contents."""
        self.package = None
        """:class:`~ovfpatch.package.PackageDirectory`, once run."""

    @property
    def ova(self):
        """OVA file to extract."""
        return self._ova

    @ova.setter
    def ova(self, value):
        if not os.path.isfile(value):
            raise InvalidInputError("Specified OVA {0} does not exist!"
                                    .format(value))
        self._ova = value

    def ready_to_run(self):
        """Check whether the module is ready to :meth:`run`.

        Returns:
          tuple: ``(True, ready_message)`` or ``(False, reason_why_not)``
        """
        if self.ova is None:
            return False, "OVA is a mandatory argument!"
        if not self.directory:
            return False, "DIRECTORY is a mandatory argument!"
        # The extracted files take up about as much space as the archive
        if not self.check_disk_space(os.path.getsize(self.ova),
                                     self.directory,
                                     label="Extracted package"):
            return (False,
                    "Insufficient disk space available to guarantee"
                    " successful extraction")
        return super(Unpack, self).ready_to_run()

    def run(self):
        """Do the actual work of this command.

        Raises:
          InvalidInputError: if :meth:`ready_to_run` reports ``False``
        """
        super(Unpack, self).run()
        self.package = unpack(self.ova, self.directory, force=self.overwrite)

    def create_subparser(self):
        """Create 'unpack' CLI subparser."""
        parser = self.ui.add_subparser(
            'unpack',
            aliases=['extract'],
            help="""Extract an OVA into a directory""",
            usage=self.ui.fill_usage("unpack", [
                "OVA DIRECTORY [--overwrite]",
            ]),
            description="""
Extract the contents of OVA into DIRECTORY. If DIRECTORY already has
contents it is assumed to hold an earlier extraction and is left alone,
unless --overwrite is given. Archives with absolute or parent-relative
member paths, links, or device files are rejected.""")

        parser.add_argument(
            '--overwrite', action='store_true', default=None,
            help="""Re-extract even if DIRECTORY is not empty""")
        parser.add_argument('OVA', help="""OVA file to extract""")
        parser.add_argument('DIRECTORY', help="""Directory to extract into""")
        parser.set_defaults(instance=self)


command_classes.append(Unpack)
