#!/usr/bin/env python
#
# test_fetch.py - Unit test cases for OVA downloads
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

"""Unit test cases for the ovfpatch.fetch module."""

import os
import os.path

import mock
import requests

from ovfpatch.fetch import FetchError, fetch
from ovfpatch.tests import OVPTestCase


def fake_response(chunks=(), error=None):
    """Build a stand-in for a streamed :class:`requests.Response`.

    Args:
      chunks (list): Body chunks to return from ``iter_content``.
      error (Exception): Raised by ``raise_for_status`` if given.
    Returns:
      mock.MagicMock: Response object usable as a context manager.
    """
    response = mock.MagicMock()
    response.__enter__.return_value = response
    response.iter_content.return_value = iter(chunks)
    if error is not None:
        response.raise_for_status.side_effect = error
    return response


class TestFetch(OVPTestCase):
    """Test cases for fetch()."""

    URL = "https://example.com/appliances/app.ova"

    def setUp(self):
        """Test case setup function called automatically prior to each test."""
        super(TestFetch, self).setUp()
        self.output = os.path.join(self.temp_dir, "app.ova")

    @mock.patch('requests.get')
    def test_download(self, mock_get):
        """The body is streamed into the output file."""
        mock_get.return_value = fake_response([b"abc", b"def"])
        self.assertEqual(self.output, fetch(self.URL, self.output))
        mock_get.assert_called_once_with(self.URL, stream=True, timeout=60)
        self.assertEqual(b"abcdef", self.read_bytes(self.output))
        self.assertEqual(["app.ova"], os.listdir(self.temp_dir))
        self.assertLogged(levelname='NOTICE', msg="Downloading %s to %s")

    @mock.patch('requests.get')
    def test_default_output_name(self, mock_get):
        """Without an output path the file is named after the URL."""
        mock_get.return_value = fake_response([b"ova"])
        cwd = os.getcwd()
        os.chdir(self.temp_dir)
        try:
            self.assertEqual("app.ova", fetch(self.URL))
        finally:
            os.chdir(cwd)
        self.assertEqual(b"ova", self.read_bytes(self.output))
        self.assertLogged(levelname='NOTICE', msg="Downloading %s to %s")

    @mock.patch('requests.get')
    def test_existing_output(self, mock_get):
        """No request is made if the output already exists."""
        with open(self.output, 'wb') as fileobj:
            fileobj.write(b"cached")
        self.assertEqual(self.output, fetch(self.URL, self.output))
        mock_get.assert_not_called()
        self.assertEqual(b"cached", self.read_bytes(self.output))
        self.assertLogged(levelname='NOTICE',
                          msg="already exists, skipping download")

    @mock.patch('requests.get')
    def test_existing_output_forced(self, mock_get):
        """With force, an existing output is downloaded again."""
        with open(self.output, 'wb') as fileobj:
            fileobj.write(b"cached")
        mock_get.return_value = fake_response([b"fresh"])
        fetch(self.URL, self.output, force=True)
        self.assertEqual(b"fresh", self.read_bytes(self.output))
        self.assertLogged(levelname='NOTICE', msg="Downloading %s to %s")

    @mock.patch('requests.get')
    def test_http_error(self, mock_get):
        """An HTTP error status raises FetchError and leaves nothing."""
        mock_get.return_value = fake_response(
            error=requests.exceptions.HTTPError("404 Client Error"))
        with self.assertRaises(FetchError) as catcher:
            fetch(self.URL, self.output)
        self.assertEqual(self.output, catcher.exception.filename)
        self.assertIn("404 Client Error", catcher.exception.strerror)
        self.assertEqual([], os.listdir(self.temp_dir))
        self.assertLogged(levelname='NOTICE', msg="Downloading %s to %s")

    @mock.patch('requests.get',
                side_effect=requests.exceptions.ConnectionError("refused"))
    def test_connection_error(self, _):
        """A connection failure raises FetchError and leaves nothing."""
        self.assertRaises(FetchError, fetch, self.URL, self.output)
        self.assertEqual([], os.listdir(self.temp_dir))
        self.assertLogged(levelname='NOTICE', msg="Downloading %s to %s")
