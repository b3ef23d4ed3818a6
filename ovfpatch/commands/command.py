#!/usr/bin/env python
#
# command.py - Abstract interface for ovfpatch command implementations.
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

"""Parent classes for implementing ovfpatch subcommands.

**Classes**

.. autosummary::
  :nosignatures:

  Command
  PatchCommand
"""

import logging
import os
import os.path

from ovfpatch.data_validation import (
    InvalidInputError, canonicalize_choice, validate_resource_type,
)
from ovfpatch.patcher import PATCH_METHODS, SOUND_CARD
from ovfpatch.utilities import available_bytes_at_path, pretty_bytes

logger = logging.getLogger(__name__)

command_classes = []   # pylint: disable=invalid-name
"""Dynamically constructed list of concrete command classes."""

RESOURCE_TYPE_ENV = 'OVFPATCH_RESOURCE_TYPE'
METHOD_ENV = 'OVFPATCH_METHOD'


class Command(object):
    """Base of every ovfpatch subcommand.

    A command is configured through its properties (by the CLI or by a
    library caller), then :meth:`run` does the work and :meth:`finished`
    reports on it. :meth:`destroy` is always called last.

    Attributes:
    :attr:`ui`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        self.ui = ui
        """User interface instance (:class:`~ovfpatch.ui.UI` or subclass)."""
        self._space_checks = {}
        """Directory -> (bytes required, bytes available) already checked."""

    def ready_to_run(self):   # pylint: disable=no-self-use
        """Check whether all required attributes have been set.

        Returns:
          tuple: ``(True, ready_message)`` or ``(False, reason_why_not)``
        """
        return True, "Ready to go!"

    def run(self):
        """Do the work of this command; subclasses extend this.

        Raises:
          InvalidInputError: if :meth:`ready_to_run` reports ``False``
        """
        (ready, reason) = self.ready_to_run()
        if not ready:
            raise InvalidInputError(reason)

    def finished(self):
        """Report the outcome of :meth:`run`. Nothing to report here."""
        pass

    def destroy(self):
        """Release any resources held by this command."""
        pass

    def create_subparser(self):
        """Register this command with the CLI; abstract commands do not."""
        pass

    def check_disk_space(self, required_size, location, label="File",
                         force_check=False, die=False):
        """Warn the user if ``location`` lacks room for ``required_size``.

        Results are remembered per directory, so a later call for the same
        directory only re-checks (and re-prompts) when it asks for more
        space than before or ``force_check`` is set.

        Args:
          required_size (int): Bytes required
          location (str): File or directory that will be written. A path
            that does not exist yet is checked at its nearest existing
            parent directory.
          label (str): What will be written, for the prompt text.
          force_check (bool): Ignore any previous result for this directory.
          die (bool): Abort via :meth:`~ovfpatch.ui.UI.confirm_or_die`
            rather than return ``False`` if the user declines.

        Returns:
          bool: Whether there is enough space, or the user chose to go on
          regardless.

        Raises:
          SystemExit: if ``die`` is set and the user declines.
        """
        dir_path = os.path.abspath(location)
        while not os.path.isdir(dir_path):
            dir_path = os.path.dirname(dir_path)

        previous = self._space_checks.get(dir_path)
        if previous and required_size <= previous[0] and not force_check:
            return required_size <= previous[1]

        logger.verbose("Need %s for %s in %s", pretty_bytes(required_size),
                       label.lower(), dir_path)
        available = available_bytes_at_path(dir_path)
        self._space_checks[dir_path] = (required_size, available)
        if required_size <= available:
            return True

        prompt = ("{0} may require approximately {1} of disk space, but only"
                  " {2} is available at {3}.\nOperation may fail."
                  " Continue anyway?"
                  .format(label, pretty_bytes(required_size),
                          pretty_bytes(available), location))
        if die:
            self.ui.confirm_or_die(prompt)
            return True
        return self.ui.confirm(prompt)


class PatchCommand(Command):
    """Command that removes device items from an OVF descriptor.

    Inherited attributes:
    :attr:`~Command.ui`

    Attributes:
    :attr:`resource_type`,
    :attr:`method`,
    :attr:`update_manifest`
    """

    def __init__(self, ui):
        """Instantiate this command with the given UI.

        Args:
          ui (UI): User interface instance.
        """
        super(PatchCommand, self).__init__(ui)
        self._resource_type = SOUND_CARD
        self._method = 'auto'
        self.update_manifest = True
        """Whether to refresh the descriptor's manifest entry."""
        self.result = None
        """:class:`~ovfpatch.package.PatchResult` once :meth:`run` is done."""

    @property
    def resource_type(self):
        """CIM ResourceType of the device items to remove (default 35)."""
        return self._resource_type

    @resource_type.setter
    def resource_type(self, value):
        self._resource_type = validate_resource_type(value)

    @property
    def method(self):
        """How to edit the descriptor: ``auto``, ``xml``, or ``text``."""
        return self._method

    @method.setter
    def method(self, value):
        self._method = canonicalize_choice("patch method", value,
                                           PATCH_METHODS)

    @staticmethod
    def add_patch_arguments(group):
        """Add the device-selection options shared by patching commands.

        Args:
          group (object): Argument parser or argument group to extend.
        """
        group.add_argument(
            '-t', '--resource-type', metavar='N',
            default=os.environ.get(RESOURCE_TYPE_ENV),
            help="""CIM ResourceType of the device items to remove"""
            """ (default: ${0} or {1}, sound card)"""
            .format(RESOURCE_TYPE_ENV, SOUND_CARD))
        group.add_argument(
            '-m', '--method', choices=PATCH_METHODS,
            default=os.environ.get(METHOD_ENV),
            help="""How to edit the descriptor: 'xml' edits the parsed"""
            """ document, 'text' deletes matching line ranges, 'auto'"""
            """ uses 'xml' with 'text' as a fallback"""
            """ (default: ${0} or auto)""".format(METHOD_ENV))
        group.add_argument(
            '--no-manifest', dest='update_manifest', action='store_false',
            help="""Do not refresh the descriptor's manifest entry""")
