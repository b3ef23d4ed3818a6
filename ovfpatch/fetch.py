#!/usr/bin/env python
#
# fetch.py - Cached download of appliance archives
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

"""Download of OVA files, skipped if the file is already present.

**Exceptions**

.. autosummary::
  :nosignatures:

  FetchError

**Functions**

.. autosummary::
  :nosignatures:

  fetch
  filename_from_url
"""

import logging
import os
import os.path
import posixpath
import tempfile

from urllib.parse import urlparse

import requests

from ovfpatch.utilities import TEMP_PREFIX, pretty_bytes

logger = logging.getLogger(__name__)


class FetchError(EnvironmentError):
    """A file could not be downloaded."""


def filename_from_url(url):
    """Guess a local file name for the given URL.

    Args:
      url (str): URL to download
    Returns:
      str: Last path component of the URL, or ``download.ova``.
    Examples:
      ::

        >>> filename_from_url("https://example.com/ova/appliance-v1.ova?x=1")
        'appliance-v1.ova'
        >>> filename_from_url("https://example.com/")
        'download.ova'
    """
    name = posixpath.basename(urlparse(url).path)
    return name or 'download.ova'


def is_url(source):
    """Whether the given source string looks like an HTTP(S) URL.

    Args:
      source (str): URL or local file path
    Returns:
      bool: True for ``http://`` and ``https://`` URLs.
    Examples:
      ::

        >>> is_url("https://example.com/foo.ova")
        True
        >>> is_url("/tmp/foo.ova")
        False
    """
    return urlparse(source).scheme in ('http', 'https')


def fetch(url, output=None, force=False, timeout=60, chunk_size=1 << 20):
    """Download the given URL to a local file unless it already exists.

    The body is streamed into a scratch file beside ``output``, which is
    renamed into place only once the download is complete.

    Args:
      url (str): URL to download.
      output (str): Local file to create. Defaults to the URL's file name
          in the current directory.
      force (bool): Download even if ``output`` already exists.
      timeout (float): Connect/read timeout in seconds.
      chunk_size (int): Bytes to read per chunk.

    Returns:
      str: Path to the local file.

    Raises:
      FetchError: if the request fails or returns an HTTP error status.
    """
    if output is None:
        output = filename_from_url(url)
    if os.path.exists(output) and not force:
        logger.notice("%s already exists, skipping download", output)
        return output

    logger.notice("Downloading %s to %s", url, output)
    (fd, tmp_path) = tempfile.mkstemp(
        prefix=TEMP_PREFIX, suffix='.part',
        dir=os.path.dirname(os.path.abspath(output)))
    total = 0
    try:
        with os.fdopen(fd, 'wb') as fileobj:
            try:
                response = requests.get(url, stream=True, timeout=timeout)
                with response:
                    response.raise_for_status()
                    for chunk in response.iter_content(chunk_size=chunk_size):
                        fileobj.write(chunk)
                        total += len(chunk)
                        logger.spam("Downloaded %s so far",
                                    pretty_bytes(total))
            except requests.exceptions.RequestException as exc:
                raise FetchError(1, "Unable to download {0}: {1}"
                                 .format(url, exc), output)
        os.replace(tmp_path, output)
        tmp_path = None
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info("Downloaded %s to %s", pretty_bytes(total), output)
    return output


if __name__ == "__main__":   # pragma: no cover
    import doctest
    doctest.testmod()
