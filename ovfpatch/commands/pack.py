#!/usr/bin/env python
#
# pack.py - Implements "pack" sub-command
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

"""Implements "pack" subcommand."""

import logging
import os.path

from ovfpatch.data_validation import InvalidInputError
from ovfpatch.package import PackageDirectory, pack
from .command import command_classes, Command

logger = logging.getLogger(__name__)


class Pack(Command):
    """Archive a package directory into an OVA.

    Inherited attributes:
    :attr:`~Command.ui`

    Attributes:
    :attr:`directory`,
    :attr:`ova`,
    :attr:`first_descriptor`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        super(Pack, self).__init__(ui)
        self._directory = None
        self._ova = None
        self.first_descriptor = False
        """If several descriptors exist, use the first instead of failing."""
        self.members = None
        """Archived file names in archive order, once run."""

    @property
    def directory(self):
        """Package directory to archive."""
        return self._directory

    @directory.setter
    def directory(self, value):
        if not os.path.isdir(value):
            raise InvalidInputError("Specified directory {0} does not exist!"
                                    .format(value))
        self._directory = value

    @property
    def ova(self):
        """OVA file to create."""
        return self._ova

    @ova.setter
    def ova(self, value):
        if os.path.isdir(value):
            raise InvalidInputError("OVA {0} is a directory!".format(value))
        if os.path.exists(value):
            self.ui.confirm_or_die("Overwrite existing file {0}?"
                                   .format(value))
        self._ova = value

    def ready_to_run(self):
        """Check whether the module is ready to :meth:`run`.

        Returns:
          tuple: ``(True, ready_message)`` or ``(False, reason_why_not)``
        """
        if self.directory is None:
            return False, "DIRECTORY is a mandatory argument!"
        if self.ova is None:
            return False, "OVA is a mandatory argument!"
        package = PackageDirectory(self.directory,
                                   strict=not self.first_descriptor)
        if not self.check_disk_space(package.predicted_archive_size(),
                                     self.ova, label="Archive"):
            return (False,
                    "Insufficient disk space available to guarantee"
                    " successful creation of the archive")
        return super(Pack, self).ready_to_run()

    def run(self):
        """Do the actual work of this command.

        Raises:
          InvalidInputError: if :meth:`ready_to_run` reports ``False``
        """
        super(Pack, self).run()
        self.members = pack(self.directory, self.ova,
                            strict=not self.first_descriptor)

    def create_subparser(self):
        """Create 'pack' CLI subparser."""
        parser = self.ui.add_subparser(
            'pack',
            help="""Archive a package directory into an OVA""",
            usage=self.ui.fill_usage("pack", [
                "DIRECTORY OVA [--first-descriptor]",
            ]),
            description="""
Create OVA from the files in DIRECTORY. The OVF descriptor is stored first
and the manifest second, as the OVF standard requires. Certificates are left
out, as they no longer match a modified package.""")

        parser.add_argument(
            '--first-descriptor', action='store_true', default=None,
            help="""If the package has several .ovf files, archive the"""
            """ first one as the descriptor instead of failing""")
        parser.add_argument('DIRECTORY', help="""Package directory""")
        parser.add_argument('OVA', help="""OVA file to create""")
        parser.set_defaults(instance=self)


command_classes.append(Pack)
