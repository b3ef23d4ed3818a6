#!/usr/bin/env python
#
# update_manifest.py - Implements "update-manifest" sub-command
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

"""Implements "update-manifest" subcommand."""

import logging
import os.path

from ovfpatch.data_validation import InvalidInputError
from ovfpatch.manifest import recompute_manifest_digest
from .command import command_classes, Command

logger = logging.getLogger(__name__)


class UpdateManifest(Command):
    """Refresh one file's digest in an OVF manifest.

    Inherited attributes:
    :attr:`~Command.ui`

    Attributes:
    :attr:`manifest`,
    :attr:`file`,
    :attr:`algorithm`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        super(UpdateManifest, self).__init__(ui)
        self._manifest = None
        self.file = None
        """Name of the file, beside the manifest, whose entry to refresh."""
        self.algorithm = None
        """Digest algorithm; by default the one the manifest already uses."""
        self.digest = None
        """New digest, once :meth:`run` is done."""

    @property
    def manifest(self):
        """Path to the ``.mf`` file to update."""
        return self._manifest

    @manifest.setter
    def manifest(self, value):
        if not os.path.isfile(value):
            raise InvalidInputError("Specified manifest {0} does not exist!"
                                    .format(value))
        self._manifest = value

    def ready_to_run(self):
        """Check whether the module is ready to :meth:`run`.

        Returns:
          tuple: ``(True, ready_message)`` or ``(False, reason_why_not)``
        """
        if self.manifest is None:
            return False, "MANIFEST is a mandatory argument!"
        if not self.file:
            return False, "FILE is a mandatory argument!"
        return super(UpdateManifest, self).ready_to_run()

    def run(self):
        """Do the actual work of this command.

        Raises:
          InvalidInputError: if :meth:`ready_to_run` reports ``False``
        """
        super(UpdateManifest, self).run()
        self.digest = recompute_manifest_digest(self.manifest, self.file,
                                                self.algorithm)

    def finished(self):
        """Report the new digest."""
        print("{0}: {1}".format(os.path.basename(self.file), self.digest))

    def create_subparser(self):
        """Create 'update-manifest' CLI subparser."""
        parser = self.ui.add_subparser(
            'update-manifest',
            help="""Recompute the digest of one file in an OVF manifest""",
            usage=self.ui.fill_usage("update-manifest", [
                "MANIFEST FILE [-a ALGORITHM]",
            ]),
            description="""
Recompute the digest of FILE (found in the same directory as MANIFEST) and
store it in MANIFEST, keeping every other line of the manifest as it was.""")

        parser.add_argument(
            '-a', '--algorithm',
            help="""Digest algorithm such as SHA1, SHA256 or SHA512"""
            """ (default: the one MANIFEST already uses for FILE,"""
            """ or SHA256)""")
        parser.add_argument('MANIFEST', help="""Manifest (.mf) file""")
        parser.add_argument('FILE', help="""File whose entry to refresh""")
        parser.set_defaults(instance=self)


command_classes.append(UpdateManifest)
