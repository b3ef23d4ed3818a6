#!/usr/bin/env python
#
# fetch.py - Implements "fetch" sub-command
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

"""Implements "fetch" subcommand."""

import logging

from ovfpatch.data_validation import InvalidInputError
from ovfpatch.fetch import fetch, is_url
from .command import command_classes, Command

logger = logging.getLogger(__name__)


class Fetch(Command):
    """Download an OVA unless it is already present.

    Inherited attributes:
    :attr:`~Command.ui`

    Attributes:
    :attr:`url`,
    :attr:`output`,
    :attr:`overwrite`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        super(Fetch, self).__init__(ui)
        self._url = None
        self.output = None
        """Local file to download to; by default named after the URL."""
        self.overwrite = False
        """Download again even if :attr:`output` exists."""

    @property
    def url(self):
        """HTTP(S) URL to download."""
        return self._url

    @url.setter
    def url(self, value):
        if not is_url(value):
            raise InvalidInputError("{0} is not an http:// or https:// URL"
                                    .format(value))
        self._url = value

    def ready_to_run(self):
        """Check whether the module is ready to :meth:`run`.

        Returns:
          tuple: ``(True, ready_message)`` or ``(False, reason_why_not)``
        """
        if self.url is None:
            return False, "URL is a mandatory argument!"
        return super(Fetch, self).ready_to_run()

    def run(self):
        """Do the actual work of this command.

        Raises:
          InvalidInputError: if :meth:`ready_to_run` reports ``False``
        """
        super(Fetch, self).run()
        self.output = fetch(self.url, self.output, force=self.overwrite)

    def create_subparser(self):
        """Create 'fetch' CLI subparser."""
        parser = self.ui.add_subparser(
            'fetch',
            aliases=['download'],
            help="""Download an OVA unless it is already present""",
            usage=self.ui.fill_usage("fetch", [
                "URL [-o OUTPUT] [--overwrite]",
            ]),
            description="""
Download URL to OUTPUT. Nothing is downloaded if OUTPUT already exists,
unless --overwrite is given.""")

        parser.add_argument(
            '-o', '--output',
            help="""Local file to create (default: the last path component"""
            """ of URL, in the current directory)""")
        parser.add_argument(
            '--overwrite', action='store_true', default=None,
            help="""Download again even if OUTPUT exists""")
        parser.add_argument('URL', help="""URL to download""")
        parser.set_defaults(instance=self)


command_classes.append(Fetch)
