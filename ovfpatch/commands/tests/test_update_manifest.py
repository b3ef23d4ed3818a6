#!/usr/bin/env python
#
# test_update_manifest.py - test cases for the UpdateManifest command
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

"""Test cases for the ovfpatch.commands.update_manifest module."""

import os.path

from ovfpatch.commands.tests.command_testcase import CommandTestCase
from ovfpatch.commands.update_manifest import UpdateManifest
from ovfpatch.data_validation import InvalidInputError
from ovfpatch.manifest import DigestUnavailableError, file_checksum


class TestUpdateManifest(CommandTestCase):
    """Test the UpdateManifest command."""

    command_class = UpdateManifest

    def setUp(self):
        """Test case setup function called automatically prior to each test."""
        super(TestUpdateManifest, self).setUp()
        self.path = self.make_package(self.sound_ovf, self.sound_mf)
        self.manifest = os.path.join(self.path, "app.mf")
        self.descriptor = os.path.join(self.path, "app.ovf")

    def test_readiness(self):
        """Test ready_to_run() under various combinations of parameters."""
        ready, reason = self.command.ready_to_run()
        self.assertFalse(ready)
        self.assertEqual("MANIFEST is a mandatory argument!", reason)

        self.command.manifest = self.manifest
        ready, reason = self.command.ready_to_run()
        self.assertFalse(ready)
        self.assertEqual("FILE is a mandatory argument!", reason)

        self.command.file = "app.ovf"
        ready, reason = self.command.ready_to_run()
        self.assertTrue(ready)

    def test_invalid_manifest(self):
        """The manifest must be an existing file."""
        with self.assertRaises(InvalidInputError):
            self.command.manifest = os.path.join(self.path, "missing.mf")
        with self.assertRaises(InvalidInputError):
            self.command.manifest = self.path

    def test_update(self):
        """The new digest is stored and reported."""
        digest = file_checksum(self.descriptor, 'sha256')
        self.command.manifest = self.manifest
        self.command.file = "app.ovf"
        self.check_output("app.ovf: " + digest)
        self.assertEqual(digest, self.command.digest)
        self.assertIn("SHA256(app.ovf)= " + digest,
                      self.read_bytes(self.manifest).decode('utf-8'))

    def test_update_algorithm(self):
        """An explicit algorithm replaces the one in the manifest."""
        self.command.manifest = self.manifest
        self.command.file = "app.ovf"
        self.command.algorithm = "sha1"
        self.check_output("app.ovf: " +
                          file_checksum(self.descriptor, 'sha1'))
        self.assertLogged(levelname='WARNING',
                          msg="lists %s with algorithm %s; replacing it")
        self.assertTrue(self.read_bytes(self.manifest).startswith(
            b"SHA1(app.ovf)= "))

    def test_unknown_algorithm(self):
        """An unknown algorithm is an error."""
        self.command.manifest = self.manifest
        self.command.file = "app.ovf"
        self.command.algorithm = "foo512"
        self.assertRaises(DigestUnavailableError, self.command.run)
