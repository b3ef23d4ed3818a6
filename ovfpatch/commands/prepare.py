#!/usr/bin/env python
#
# prepare.py - Implements "prepare" sub-command
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

"""Module for turning a downloaded appliance into an importable one.

Runs the whole workflow in one go: fetch the OVA if given a URL, unpack it,
remove the unwanted devices, refresh the manifest, and pack a new OVA.
Each step that finds its result already present is skipped, so the command
can be re-run after a failure.

**Classes**

.. autosummary::
  :nosignatures:

  Prepare
"""

import argparse
import logging
import os.path

from ovfpatch.data_validation import InvalidInputError
from ovfpatch.fetch import fetch, filename_from_url, is_url
from ovfpatch.package import pack, unpack
from .command import command_classes, PatchCommand

logger = logging.getLogger(__name__)


class Prepare(PatchCommand):
    """Fetch, unpack, patch, and re-pack an appliance.

    Inherited attributes:
    :attr:`~Command.ui`,
    :attr:`~PatchCommand.resource_type`,
    :attr:`~PatchCommand.method`,
    :attr:`~PatchCommand.update_manifest`

    Attributes:
    :attr:`source`,
    :attr:`output`,
    :attr:`workdir`,
    :attr:`overwrite`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        super(Prepare, self).__init__(ui)
        self._source = None
        self._output = None
        self._workdir = None
        self.overwrite = False
        """Download and extract again even if earlier results exist."""

    @property
    def source(self):
        """URL or local path of the OVA to prepare."""
        return self._source

    @source.setter
    def source(self, value):
        if not is_url(value) and not os.path.isfile(value):
            raise InvalidInputError("Specified OVA {0} does not exist!"
                                    .format(value))
        self._source = value

    @property
    def local_source(self):
        """Path of the source OVA on the local disk."""
        if self.source is None or not is_url(self.source):
            return self.source
        return filename_from_url(self.source)

    @property
    def stem(self):
        """Base name of the source OVA without its extension."""
        return os.path.splitext(os.path.basename(self.local_source))[0]

    @property
    def output(self):
        """Patched OVA to create (default: ``<name>-modified.ova``)."""
        if self._output is None and self.source is not None:
            return os.path.join(os.path.dirname(self.local_source),
                                self.stem + "-modified.ova")
        return self._output

    @output.setter
    def output(self, value):
        if os.path.isdir(value):
            raise InvalidInputError("Output {0} is a directory!"
                                    .format(value))
        self._output = value

    @property
    def workdir(self):
        """Directory to extract into (default: ``<name>-ova``)."""
        if self._workdir is None and self.source is not None:
            return os.path.join(os.path.dirname(self.local_source),
                                self.stem + "-ova")
        return self._workdir

    @workdir.setter
    def workdir(self, value):
        self._workdir = value

    def ready_to_run(self):
        """Check whether the module is ready to :meth:`run`.

        Returns:
          tuple: ``(True, ready_message)`` or ``(False, reason_why_not)``
        """
        if self.source is None:
            return False, "SOURCE is a mandatory argument!"
        if os.path.abspath(self.output) == os.path.abspath(self.local_source):
            return False, "Output must not be the same file as the source!"
        return super(Prepare, self).ready_to_run()

    def run(self):
        """Do the actual work of this command.

        Raises:
          InvalidInputError: if :meth:`ready_to_run` reports ``False``
        """
        super(Prepare, self).run()

        ova = self.source
        if is_url(ova):
            ova = fetch(ova, self.local_source, force=self.overwrite)

        self.check_disk_space(os.path.getsize(ova), self.workdir,
                              label="Extracted package")
        package = unpack(ova, self.workdir, force=self.overwrite)

        self.result = package.patch(self.resource_type, self.method,
                                    update_manifest=self.update_manifest,
                                    ignore_digest_errors=True)

        if os.path.exists(self.output):
            self.ui.confirm_or_die("Overwrite existing file {0}?"
                                   .format(self.output))
        self.check_disk_space(package.predicted_archive_size(), self.output,
                              label="Archive", die=True)
        pack(package.path, self.output)

    def finished(self):
        """Tell the user where the result is."""
        logger.notice("Patched appliance is ready to import: %s",
                      self.output)

    def create_subparser(self):
        """Create 'prepare' CLI subparser."""
        parser = self.ui.add_subparser(
            'prepare',
            help="""Fetch, unpack, patch and re-pack an appliance""",
            usage=self.ui.fill_usage("prepare", [
                "SOURCE [-o OUTPUT] [-d WORKDIR] [-t N] [-m {auto,xml,text}]"
                " [--no-manifest] [--overwrite]",
            ]),
            description="""
Make an appliance importable by a hypervisor that does not support some of
its virtual hardware (by default, its sound card). SOURCE may be an OVA
file or an http(s) URL of one, which is downloaded unless it already
exists. The OVA is extracted into WORKDIR, the devices are removed from its
descriptor, its manifest is refreshed, and the result is written to
OUTPUT.""",
            epilog=self.ui.fill_examples([
                ("Download an appliance and strip its sound card, writing"
                 " 'appliance-modified.ova'.",
                 'ovfpatch prepare https://example.com/appliance.ova'),
                ("Strip the sound card from a local OVA, using line-based"
                 " editing only.",
                 'ovfpatch prepare appliance.ova -m text -o patched.ova'),
            ]),
            formatter_class=argparse.RawDescriptionHelpFormatter)

        parser.add_argument(
            '-o', '--output',
            help="""OVA file to create (default: SOURCE name with"""
            """ '-modified' added)""")
        parser.add_argument(
            '-d', '--workdir',
            help="""Directory to extract into (default: SOURCE name with"""
            """ '-ova' added)""")
        self.add_patch_arguments(parser)
        parser.add_argument(
            '--overwrite', action='store_true', default=None,
            help="""Download and extract again even if earlier results"""
            """ exist""")
        parser.add_argument('SOURCE', help="""OVA file or URL""")
        parser.set_defaults(instance=self)


command_classes.append(Prepare)
