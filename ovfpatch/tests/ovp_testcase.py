#!/usr/bin/env python
#
# ovp_testcase.py - base class for ovfpatch test cases
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

"""Generic unit test case implementation for ovfpatch."""

import logging
import os.path
import re
import shutil
import tempfile
import unittest
from logging import NullHandler
from logging.handlers import BufferingHandler

logger = logging.getLogger(__name__)


logging.getLogger('ovfpatch').addHandler(NullHandler())


class UTLoggingHandler(BufferingHandler):
    """Keeps every log record emitted during a test for later inspection.

    Args:
      testcase (unittest.TestCase): Test case to report failures through.
    """

    # NOTICE is not among these
    CHECKED_LEVELS = (logging.CRITICAL, logging.ERROR, logging.WARNING,
                      logging.INFO, logging.VERBOSE, logging.DEBUG)

    def __init__(self, testcase):
        BufferingHandler.__init__(self, capacity=0)
        self.setLevel(logging.DEBUG)
        self.testcase = testcase

    def emit(self, record):
        self.buffer.append(record)

    def shouldFlush(self, record):  # noqa: N802
        """Never flush on our own; tests call :meth:`flush` explicitly."""
        return False

    @staticmethod
    def _matches(record, criteria):
        """Check a record against ``criteria``.

        ``msg`` and each entry of ``args`` are regular expressions searched
        for in the record; any other key must be equal to the attribute.
        """
        for (key, expected) in criteria.items():
            actual = getattr(record, key, None)
            if key == 'msg':
                if not re.search(expected, str(actual)):
                    return False
            elif key == 'args':
                if not all(re.search(str(exp), str(act))
                           for (exp, act) in zip(expected, actual)):
                    return False
            elif expected != actual:
                return False
        return True

    def logs(self, **kwargs):
        """Get the buffered records matching all of the given attributes."""
        return [record for record in self.buffer
                if self._matches(record, kwargs)]

    def assertLogged(self, info='', **kwargs):  # noqa: N802
        """Fail unless exactly one buffered record matches, then drop it.

        Args:
          info (str): Optional string to prepend to any failure messages.
          kwargs (dict): Record attributes to match, as for :meth:`logs`.

        Raises:
          AssertionError: if no record, or more than one, matched.
        """
        matches = self.logs(**kwargs)
        if not matches:
            self.testcase.fail(
                info + "Expected logs matching {0} but none were logged!"
                .format(kwargs))
        if len(matches) > 1:
            self.testcase.fail(
                info + "Message {0} was logged {1} times instead of once!"
                .format(kwargs, len(matches)))
        self.buffer.remove(matches[0])

    def assertNoLogsOver(self, max_level, info=''):  # noqa: N802
        """Fail if anything above ``max_level`` is still in the buffer.

        Args:
          max_level (int): Highest logging level to permit.
          info (str): Optional string to prepend to any failure messages.
        Raises:
          AssertionError: if unexpected messages were found.
        """
        for level in self.CHECKED_LEVELS:
            if level <= max_level:
                break
            matches = self.logs(levelno=level)
            if matches:
                self.testcase.fail(
                    "{0}Found {1} unexpected {2} message(s):\n\n{3}"
                    .format(info, len(matches), logging.getLevelName(level),
                            "\n\n".join(r.getMessage() for r in matches)))


def _localfile(name):
    """Absolute path to a fixture file beside this module."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), name)


class OVPTestCase(unittest.TestCase):
    """Test case that captures ovfpatch logs and knows the fixture files."""

    # Standard logger messages we may expect at various points:
    REMOVED_ITEMS = {
        'levelname': 'NOTICE',
        'msg': "Removed %d device item",
    }
    ADDING_MANIFEST_ENTRY = {
        'levelname': 'NOTICE',
        'msg': "has no entry for %s; adding one",
    }
    UNSAFE_TEXT_BLOCK = {
        'levelname': 'WARNING',
        'msg': "Unable to safely identify the device item",
    }
    CERTIFICATE_LEFT_OUT = {
        'levelname': 'WARNING',
        'msg': "Leaving certificate %s out of the archive",
    }

    # Descriptor with device items of ResourceType 3, 4, 5, 35, 10, 35
    sound_ovf = _localfile("sound.ovf")
    # Manifest for sound.ovf, whose descriptor digest is out of date
    sound_mf = _localfile("sound.mf")
    # Descriptor with no sound card at all
    no_sound_ovf = _localfile("no_sound.ovf")
    # Descriptor that is malformed only within its sound card item
    bad_sound_ovf = _localfile("bad_sound.ovf")
    # Descriptor that is malformed outside of any device item
    invalid_ovf = _localfile("invalid.ovf")
    # Descriptor whose sound card item is all on one line
    one_line_ovf = _localfile("one_line.ovf")
    # OVF 2.x descriptor using StorageItem and EthernetPortItem elements
    v20_ovf = _localfile("v2.0.ovf")

    def __init__(self, method_name='runTest'):
        super(OVPTestCase, self).__init__(method_name)
        self.logging_handler = UTLoggingHandler(self)

    def setUp(self):
        """Capture ovfpatch logging and create a scratch directory."""
        root_logger = logging.getLogger('ovfpatch')
        root_logger.setLevel(logging.DEBUG)
        self.logging_handler.setLevel(logging.NOTSET)
        self.logging_handler.flush()
        root_logger.addHandler(self.logging_handler)

        self.temp_dir = tempfile.mkdtemp(prefix="ovfpatch_ut")
        logger.debug("Created temp dir %s", self.temp_dir)

    def tearDown(self):
        """Fail on unexpected warnings, then remove the scratch directory."""
        self.logging_handler.assertNoLogsOver(logging.INFO)
        logging.getLogger('ovfpatch').removeHandler(self.logging_handler)

        if os.path.exists(self.temp_dir):
            logger.debug("Deleting temp dir %s", self.temp_dir)
            shutil.rmtree(self.temp_dir)
        self.temp_dir = None

    def assertLogged(self, info='', **kwargs):  # noqa: N802
        """See :meth:`UTLoggingHandler.assertLogged`."""
        self.logging_handler.assertLogged(info=info, **kwargs)

    def assertNoLogsOver(self, max_level, info=''):  # noqa: N802
        """See :meth:`UTLoggingHandler.assertNoLogsOver`."""
        self.logging_handler.assertNoLogsOver(max_level, info=info)

    def make_package(self, descriptor=None, manifest=None, name="app"):
        """Create a package directory in :attr:`temp_dir`.

        Args:
          descriptor (str): Fixture to copy as ``<name>.ovf``, if any.
          manifest (str): Fixture to copy as ``<name>.mf``, if any.
          name (str): Base name for the copied files.
        Returns:
          str: Path to the new package directory.
        """
        path = os.path.join(self.temp_dir, name + "-ova")
        os.mkdir(path)
        if descriptor:
            shutil.copy(descriptor, os.path.join(path, name + ".ovf"))
        if manifest:
            with open(manifest) as fileobj:
                text = fileobj.read()
            with open(os.path.join(path, name + ".mf"), 'w') as fileobj:
                fileobj.write(text.replace("sound.ovf", name + ".ovf"))
        return path

    @staticmethod
    def read_bytes(path):
        """Get the contents of the given file.

        Args:
          path (str): File to read.
        Returns:
          bytes: File contents.
        """
        with open(path, 'rb') as fileobj:
            return fileobj.read()
