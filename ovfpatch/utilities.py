#!/usr/bin/env python
#
# utilities.py - General utility functions
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

"""General-purpose utility functions for ovfpatch.

**Functions**

.. autosummary::
  :nosignatures:

  atomic_write
  available_bytes_at_path
  pretty_bytes
  tar_entry_size
"""

import logging
import os
import shutil
import tempfile

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".ovfpatch"
"""Prefix of the scratch files we create beside the files we rewrite."""


def atomic_write(path, data):
    """Replace the contents of the given file without a half-written window.

    The data is written to a scratch file in the same directory, which is
    then renamed over ``path``. If anything fails before the rename, the
    scratch file is removed and ``path`` is untouched.

    Args:
      path (str): File to (over)write.
      data (bytes): Complete new contents of the file.

    Raises:
      OSError: if the scratch file cannot be written or renamed.
    """
    directory = os.path.dirname(os.path.abspath(path))
    (fd, tmp_path) = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=directory)
    logger.spam("Writing %d bytes to scratch file %s", len(data), tmp_path)
    try:
        with os.fdopen(fd, 'wb') as fileobj:
            fileobj.write(data)
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
        tmp_path = None
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
    logger.debug("Wrote %s", path)


def available_bytes_at_path(path):
    """Bytes that an unprivileged user may still write under ``path``.

    Raises:
      OSError: if ``path`` does not exist.
    """
    stats = os.statvfs(path)
    available = stats.f_bavail * stats.f_frsize
    logger.debug("%s free at %s", pretty_bytes(available), path)
    return available


def pretty_bytes(byte_value, base_shift=0):
    """Format a size with a binary unit for messages to the user.

    Args:
      byte_value (float): Size to format.
      base_shift (int): Unit ``byte_value`` is already in, as a power of
          1024 (1 = KiB, 2 = MiB).

    Returns:
      str: Size with four significant digits, such as "1.001 MiB"

    Examples:
      ::

        >>> pretty_bytes(512)
        '512 B'
        >>> pretty_bytes(65547)
        '64.01 KiB'
        >>> pretty_bytes(1049200)
        '1.001 MiB'
        >>> pretty_bytes(512, 2)
        '512 MiB'
        >>> pretty_bytes(100, -1)
        Traceback (most recent call last):
            ...
        ValueError: base_shift must not be negative
    """
    if base_shift < 0:
        raise ValueError("base_shift must not be negative")
    tags = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
    byte_value = float(byte_value)
    shift = base_shift
    while byte_value >= 1024.0 and shift < len(tags) - 1:
        byte_value /= 1024.0
        shift += 1
    while byte_value < 1.0 and shift > 0:
        byte_value *= 1024.0
        shift -= 1
    # no fractional bytes
    if shift == 0:
        byte_value = round(byte_value)
    return "{0:.4g} {1}".format(byte_value, tags[shift])


def tar_entry_size(filesize):
    """Bytes a file of ``filesize`` bytes occupies inside a TAR archive.

    That is one 512-byte header block plus the data rounded up to whole
    512-byte blocks.

    Examples:
      ::

        >>> tar_entry_size(1)
        1024
        >>> tar_entry_size(512)
        1024
        >>> tar_entry_size(513)
        1536
    """
    return 512 + filesize + ((512 - filesize) % 512)


if __name__ == "__main__":   # pragma: no cover
    import doctest
    doctest.testmod()
