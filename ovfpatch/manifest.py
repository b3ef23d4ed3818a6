#!/usr/bin/env python
#
# manifest.py - OVF manifest parsing and digest refresh
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

"""Reading and updating OVF manifest (``.mf``) files.

A manifest line has the form ``ALGO(filename)= hexdigest``.

**Exceptions**

.. autosummary::
  :nosignatures:

  DigestUnavailableError

**Functions**

.. autosummary::
  :nosignatures:

  file_checksum
  parse_manifest
  recompute_manifest_digest
"""

import hashlib
import logging
import os.path
import re

from ovfpatch.utilities import atomic_write

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = 'SHA256'
"""Algorithm used for manifest lines we create from scratch."""

# DSP0243 manifest lines read "<algo>(<filename>)= <checksum>", but tools
# also emit "<algo> (<filename>)=<checksum>" and similar. Accept either.
MANIFEST_LINE = re.compile(
    r"^\s*([A-Za-z0-9-]+)\s*\((.+)\)\s*=\s*([0-9a-fA-F]*)\s*$")


class DigestUnavailableError(EnvironmentError):
    """The requested digest algorithm is not available to this interpreter."""


def new_hash(algorithm, filename=None):
    """Create a hash object for the given manifest algorithm label.

    Args:
      algorithm (str): Label such as ``SHA256``, ``sha1``, or ``SHA512``.
      filename (str): File the digest is for, used for error context.
    Returns:
      object: New :mod:`hashlib` hash object.
    Raises:
      DigestUnavailableError: if :mod:`hashlib` has no such algorithm.
    """
    name = str(algorithm).lower().replace('-', '')
    try:
        return hashlib.new(name)
    except ValueError:
        raise DigestUnavailableError(
            1, "No support for generating checksum type {0}"
            .format(algorithm), filename)


def file_checksum(path_or_obj, checksum_type):
    """Get the checksum of the given file.

    Args:
      path_or_obj (str): File path to checksum OR an opened file object
      checksum_type (str): Algorithm label, such as 'sha256' or 'SHA1'.
    Returns:
      str: Hexadecimal file checksum
    Raises:
      DigestUnavailableError: if the algorithm is not supported.
    """
    label = path_or_obj if isinstance(path_or_obj, str) else None
    hash_obj = new_hash(checksum_type, label)

    # Is it a file or do we need to open it?
    try:
        path_or_obj.read(0)
        file_obj = path_or_obj
    except AttributeError:
        file_obj = open(path_or_obj, 'rb')

    blocksize = 65536

    try:
        while True:
            buf = file_obj.read(blocksize)
            if len(buf) == 0:
                break
            hash_obj.update(buf)
    finally:
        if file_obj != path_or_obj:
            file_obj.close()

    return hash_obj.hexdigest()


def parse_manifest(manifest_text):
    r"""Parse the given manifest file contents into a dictionary.

    Args:
      manifest_text (str): Contents of an OVF manifest file

    Returns:
      dict: Mapping of filename to (algorithm, checksum_string)

    Examples:
      ::

        >>> result = parse_manifest(
        ... "SHA1(package.ovf)= 237de026fb285b85528901da058475e56034da95\n"
        ... "SHA1 (vmdisk1.vmdk)=393a66df214e192ffbfedb78528b5be75cc9e1c3\n"
        ... )
        >>> sorted(result.keys())
        ['package.ovf', 'vmdisk1.vmdk']
        >>> result["vmdisk1.vmdk"]
        ('SHA1', '393a66df214e192ffbfedb78528b5be75cc9e1c3')
    """
    result = {}
    for line in manifest_text.splitlines():
        if not line.strip():
            continue
        match = MANIFEST_LINE.match(line)
        if match:
            result[match.group(2)] = (match.group(1), match.group(3))
        else:
            logger.error('Unexpected or invalid manifest line: "%s"', line)

    return result


def recompute_manifest_digest(manifest_path, target_filename,
                              algorithm=None):
    """Refresh the manifest entry for one file from its current contents.

    The file is located relative to the manifest's own directory. Every
    line naming ``target_filename`` has its digest value replaced in place,
    keeping that line's algorithm label, file name spelling, and spacing.
    If no line names the file, a new ``ALGO(file)= digest`` line is
    appended. All other lines are kept as-is and in order, and the file is
    not rewritten at all if nothing changed.

    Args:
      manifest_path (str): Path to the ``.mf`` file.
      target_filename (str): Name of the file whose entry to refresh.
      algorithm (str): Digest algorithm to use. Defaults to the algorithm
          already named by the file's manifest line, or
          :data:`DEFAULT_ALGORITHM` for a new line.

    Returns:
      str: The new hexadecimal digest.

    Raises:
      DigestUnavailableError: if the digest algorithm is not supported.
      OSError: if the manifest or target file cannot be read or written.
    """
    directory = os.path.dirname(os.path.abspath(manifest_path))
    entry_name = target_filename
    if os.path.isabs(target_filename):
        entry_name = os.path.basename(target_filename)
    target_path = os.path.join(directory, entry_name)

    with open(manifest_path, 'rb') as fileobj:
        text = fileobj.read().decode('utf-8')
    lines = text.splitlines(True)

    matches = []
    for (index, line) in enumerate(lines):
        match = MANIFEST_LINE.match(line.rstrip("\r\n"))
        if match and match.group(2) == entry_name:
            matches.append((index, match))

    if algorithm is None:
        algorithm = matches[0][1].group(1) if matches else DEFAULT_ALGORITHM

    digest = file_checksum(target_path, algorithm)
    logger.debug("%s(%s) is now %s", algorithm.upper(), entry_name, digest)

    for (index, match) in matches:
        line = lines[index]
        body = line.rstrip("\r\n")
        ending = line[len(body):]
        if match.group(1).upper() != algorithm.upper():
            logger.warning("Manifest %s lists %s with algorithm %s;"
                           " replacing it with %s", manifest_path,
                           entry_name, match.group(1), algorithm.upper())
            body = "{0}({1})= {2}".format(algorithm.upper(), entry_name,
                                          digest)
        else:
            body = body[:match.start(3)] + digest + body[match.end(3):]
        lines[index] = body + ending

    if not matches:
        logger.notice("Manifest %s has no entry for %s; adding one",
                      manifest_path, entry_name)
        if lines and not lines[-1].endswith("\n"):
            lines[-1] += "\n"
        lines.append("{0}({1})= {2}\n".format(algorithm.upper(), entry_name,
                                              digest))

    new_text = "".join(lines)
    if new_text == text:
        logger.verbose("Manifest entry for %s is already up to date",
                       entry_name)
        return digest

    atomic_write(manifest_path, new_text.encode('utf-8'))
    logger.info("Updated manifest %s for %s", manifest_path, entry_name)
    return digest


if __name__ == "__main__":   # pragma: no cover
    import doctest
    doctest.testmod()
