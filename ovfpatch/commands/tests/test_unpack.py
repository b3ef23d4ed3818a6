#!/usr/bin/env python
#
# test_unpack.py - test cases for the Unpack command
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

"""Test cases for the ovfpatch.commands.unpack module."""

import os
import os.path

import mock

from ovfpatch.commands.tests.command_testcase import CommandTestCase
from ovfpatch.commands.unpack import Unpack
from ovfpatch.data_validation import InvalidInputError
from ovfpatch.package import OVAFormatError


class TestUnpack(CommandTestCase):
    """Test the Unpack command."""

    command_class = Unpack

    def setUp(self):
        """Test case setup function called automatically prior to each test."""
        super(TestUnpack, self).setUp()
        self.ova = self.make_ova(self.sound_ovf, self.sound_mf)
        self.directory = os.path.join(self.temp_dir, "out")

    def test_readiness(self):
        """Test ready_to_run() under various combinations of parameters."""
        ready, reason = self.command.ready_to_run()
        self.assertFalse(ready)
        self.assertEqual("OVA is a mandatory argument!", reason)

        self.command.ova = self.ova
        ready, reason = self.command.ready_to_run()
        self.assertFalse(ready)
        self.assertEqual("DIRECTORY is a mandatory argument!", reason)

        self.command.directory = self.directory
        ready, reason = self.command.ready_to_run()
        self.assertTrue(ready)

    def test_invalid_ova(self):
        """The OVA must be an existing file."""
        with self.assertRaises(InvalidInputError):
            self.command.ova = os.path.join(self.temp_dir, "missing.ova")
        with self.assertRaises(InvalidInputError):
            self.command.ova = self.temp_dir

    @mock.patch("ovfpatch.commands.command.available_bytes_at_path",
                return_value=0)
    def test_insufficient_disk_space(self, _):
        """Declining to continue without enough space means not ready."""
        self.command.ui.default_confirm_response = False
        self.command.ova = self.ova
        self.command.directory = self.directory
        ready, reason = self.command.ready_to_run()
        self.assertFalse(ready)
        self.assertRegex(reason, "Insufficient disk space")

    def test_unpack(self):
        """Extract the OVA into the directory."""
        self.command.ova = self.ova
        self.command.directory = self.directory
        self.command.run()
        self.assertLogged(**self.EXTRACTING)
        self.assertEqual(["app.mf", "app.ovf"],
                         sorted(os.listdir(self.directory)))
        self.assertEqual(os.path.join(self.command.package.path, "app.ovf"),
                         self.command.package.descriptor)

    def test_skip_existing(self):
        """An already-populated directory is left alone."""
        os.mkdir(self.directory)
        marker = os.path.join(self.directory, "keep.txt")
        open(marker, 'w').close()
        self.command.ova = self.ova
        self.command.directory = self.directory
        self.command.run()
        self.assertLogged(**self.SKIPPING_EXTRACTION)
        self.assertEqual(["keep.txt"], os.listdir(self.directory))

        self.command.overwrite = True
        self.command.run()
        self.assertLogged(**self.EXTRACTING)
        self.assertEqual(["app.mf", "app.ovf"],
                         sorted(os.listdir(self.directory)))

    def test_not_an_ova(self):
        """A file that is not a TAR archive is an error."""
        self.command.ova = self.sound_ovf
        self.command.directory = self.directory
        self.assertRaises(OVAFormatError, self.command.run)
        self.assertLogged(**self.EXTRACTING)
        self.assertFalse(os.path.exists(self.directory))
