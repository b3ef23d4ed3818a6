#!/usr/bin/env python
#
# package.py - Extracted OVF package directories and OVA archives
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

"""Extracted OVF package directories and the OVA archives they come from.

**Exceptions**

.. autosummary::
  :nosignatures:

  PackageError
  NoDescriptorFoundError
  AmbiguousDescriptorError
  OVAFormatError

**Classes**

.. autosummary::
  :nosignatures:

  PackageDirectory
  PatchResult

**Functions**

.. autosummary::
  :nosignatures:

  pack
  unpack
"""

import errno
import logging
import os
import os.path
import shutil
import tarfile
import tempfile
from collections import namedtuple

from ovfpatch.data_validation import natural_sort
from ovfpatch.manifest import (
    DigestUnavailableError, recompute_manifest_digest,
)
from ovfpatch.patcher import SOUND_CARD, remove_devices_by_resource_type
from ovfpatch.utilities import TEMP_PREFIX, tar_entry_size

logger = logging.getLogger(__name__)

OVF_EXTENSION = '.ovf'
MANIFEST_EXTENSION = '.mf'
CERTIFICATE_EXTENSION = '.cert'
BACKUP_EXTENSION = '.backup'


class PackageError(EnvironmentError):
    """Problem with the layout or contents of an OVF package."""


class NoDescriptorFoundError(PackageError):
    """The package directory contains no OVF descriptor."""


class AmbiguousDescriptorError(PackageError):
    """The package directory contains more than one OVF descriptor."""


class OVAFormatError(PackageError):
    """The given file is not a valid (or safe) OVA archive."""


PatchResult = namedtuple('PatchResult',
                         ['descriptor', 'removed', 'manifest', 'digest'])
"""Outcome of :meth:`PackageDirectory.patch`.

``manifest`` and ``digest`` are None if no manifest entry was refreshed.
"""


class PackageDirectory(object):
    """A directory holding the unpacked contents of an OVA.

    Args:
      path (str): Directory path.
      strict (bool): If True, more than one ``.ovf`` file is an error.
          If False, the first in natural sort order is used.

    Raises:
      PackageError: if ``path`` is not a directory.
    """

    def __init__(self, path, strict=True):
        """Wrap the given directory."""
        if not os.path.isdir(path):
            raise PackageError(errno.ENOTDIR,
                               "Package directory does not exist or is not"
                               " a directory", path)
        self.path = os.path.abspath(path)
        self.strict = strict
        self._descriptor = None

    def __repr__(self):
        return "PackageDirectory({0!r})".format(self.path)

    @property
    def files(self):
        """Regular files in the package, in natural sort order."""
        return natural_sort(
            name for name in os.listdir(self.path)
            if os.path.isfile(os.path.join(self.path, name)) and
            not name.startswith(TEMP_PREFIX))

    @property
    def descriptor(self):
        """Path to the OVF descriptor in this package.

        Raises:
          NoDescriptorFoundError: if there is no ``.ovf`` file.
          AmbiguousDescriptorError: if there are several and :attr:`strict`.
        """
        if self._descriptor is None:
            candidates = [name for name in self.files
                          if name.lower().endswith(OVF_EXTENSION)]
            if not candidates:
                raise NoDescriptorFoundError(
                    errno.ENOENT,
                    "No OVF descriptor (*.ovf) found in package directory",
                    self.path)
            if len(candidates) > 1:
                if self.strict:
                    raise AmbiguousDescriptorError(
                        1, "Multiple OVF descriptors found ({0}); expected"
                        " exactly one".format(", ".join(candidates)),
                        self.path)
                logger.warning("Multiple OVF descriptors found in %s (%s);"
                               " using %s", self.path,
                               ", ".join(candidates), candidates[0])
            self._descriptor = os.path.join(self.path, candidates[0])
            logger.verbose("OVF descriptor is %s", self._descriptor)
        return self._descriptor

    def _sibling(self, extension):
        """Path to the file beside the descriptor with the given extension.

        Args:
          extension (str): File extension, such as ``.mf``
        Returns:
          str: Path to that file if it exists, else None.
        """
        path = os.path.splitext(self.descriptor)[0] + extension
        if os.path.isfile(path):
            return path
        return None

    @property
    def manifest(self):
        """Path to the manifest for :attr:`descriptor`, or None."""
        return self._sibling(MANIFEST_EXTENSION)

    @property
    def certificate(self):
        """Path to the certificate for :attr:`descriptor`, or None."""
        return self._sibling(CERTIFICATE_EXTENSION)

    def patch(self, resource_type=SOUND_CARD, method='auto',
              update_manifest=True, ignore_digest_errors=False):
        """Remove device items from the descriptor and re-sign the manifest.

        The manifest is updated strictly after the descriptor has been
        rewritten, as its digest covers the patched bytes.

        Args:
          resource_type (int): CIM ResourceType of the devices to remove.
          method (str): Patch method, see
              :meth:`~ovfpatch.patcher.DocumentPatcher.factory`.
          update_manifest (bool): Whether to refresh the manifest entry.
          ignore_digest_errors (bool): If True, a missing digest algorithm
              only logs a warning and the manifest is left as it was.

        Returns:
          PatchResult: What was done.

        Raises:
          NoDescriptorFoundError: if there is no descriptor (nothing written)
          AmbiguousDescriptorError: if there are several descriptors
          DescriptorParseError: if the descriptor is not well-formed
          DigestUnavailableError: unless ``ignore_digest_errors``
        """
        descriptor = self.descriptor
        removed = remove_devices_by_resource_type(descriptor, resource_type,
                                                  method)
        logger.notice("Removed %d device item(s) with ResourceType %s from"
                      " %s", removed, resource_type,
                      os.path.basename(descriptor))

        manifest = None
        digest = None
        if not update_manifest:
            logger.verbose("Not updating manifest as requested")
        elif self.manifest is None:
            logger.info("No manifest found for %s; nothing to update",
                        os.path.basename(descriptor))
        else:
            try:
                digest = recompute_manifest_digest(
                    self.manifest, os.path.basename(descriptor))
                manifest = self.manifest
            except DigestUnavailableError as exc:
                if not ignore_digest_errors:
                    raise
                logger.warning("%s; manifest %s was not updated and no"
                               " longer matches the descriptor",
                               exc.strerror, self.manifest)

        if removed and self.certificate:
            logger.warning("Certificate %s no longer matches the modified"
                           " package and cannot be re-signed",
                           self.certificate)
        return PatchResult(descriptor, removed, manifest, digest)

    def archive_members(self):
        """Files to put in an OVA, in the order the OVF standard expects.

        The descriptor comes first and the manifest second. The remaining
        files follow in natural sort order. Certificates and backups are
        left out.

        Returns:
          list: File names relative to :attr:`path`.
        """
        descriptor = os.path.basename(self.descriptor)
        members = [descriptor]
        if self.manifest:
            members.append(os.path.basename(self.manifest))
        for name in self.files:
            if name in members or name.endswith(BACKUP_EXTENSION):
                continue
            if name.endswith(CERTIFICATE_EXTENSION):
                logger.warning("Leaving certificate %s out of the archive;"
                               " it cannot be re-signed", name)
                continue
            members.append(name)
        return members

    def predicted_archive_size(self):
        """Estimate the size of the OVA :func:`pack` would create.

        Returns:
          int: Size in bytes.
        """
        total = 1024    # two zero blocks terminate a TAR archive
        for name in self.archive_members():
            total += tar_entry_size(
                os.path.getsize(os.path.join(self.path, name)))
        return total


def unpack(ova_path, directory, force=False):
    """Extract an OVA archive into a package directory.

    Extraction happens in a scratch directory beside ``directory`` which
    is renamed into place once complete.

    Args:
      ova_path (str): Path to the OVA (TAR) file.
      directory (str): Directory to extract into.
      force (bool): Re-extract even if ``directory`` already has contents.

    Returns:
      PackageDirectory: The extracted package.

    Raises:
      OVAFormatError: if ``ova_path`` is not a TAR archive, is empty, or
          contains unsafe member paths or links.
    """
    if os.path.isdir(directory) and os.listdir(directory) and not force:
        logger.notice("%s already exists, skipping extraction", directory)
        return PackageDirectory(directory)

    logger.notice("Extracting %s to %s", ova_path, directory)
    try:
        tarf = tarfile.open(ova_path, 'r')
    except (EOFError, tarfile.TarError) as exc:
        raise OVAFormatError(1, "Could not untar file: {0}. The file appears"
                             " to be corrupted or not a valid OVA; please"
                             " re-download it".format(exc), ova_path)

    with tarf:
        members = tarf.getmembers()
        if not members:
            raise OVAFormatError(1, "No files to untar", ova_path)
        # Make sure the provided file doesn't contain any malicious paths
        for member in members:
            logger.debug("Examining path of %s prior to untar", member.name)
            path = os.path.normpath(member.name)
            if (os.path.isabs(path) or path == os.pardir or
                    path.startswith(os.pardir + os.sep)):
                raise OVAFormatError(
                    1, "Tar file contains malicious/unsafe file path"
                    " '{0}'!".format(member.name), ova_path)
            if not (member.isfile() or member.isdir()):
                raise OVAFormatError(
                    1, "Tar file contains unsupported member '{0}'"
                    " (links and devices are not allowed)"
                    .format(member.name), ova_path)
        if not members[0].name.endswith(OVF_EXTENSION):
            logger.warning("%s: OVF descriptor is not the first file in"
                           " the TAR as it should be - OVA is not"
                           " standard-compliant!", ova_path)

        parent = os.path.dirname(os.path.abspath(directory))
        if not os.path.isdir(parent):
            os.makedirs(parent)
        scratch = tempfile.mkdtemp(prefix=TEMP_PREFIX, dir=parent)
        try:
            kwargs = {}
            if hasattr(tarfile, 'data_filter'):
                kwargs['filter'] = 'data'
            tarf.extractall(path=scratch, members=members, **kwargs)
            if os.path.isdir(directory):
                shutil.rmtree(directory)
            os.rename(scratch, directory)
            scratch = None
        finally:
            if scratch is not None:
                shutil.rmtree(scratch, ignore_errors=True)

    logger.info("Extracted %d file(s) into %s", len(members), directory)
    return PackageDirectory(directory)


def pack(directory, ova_path, strict=True):
    """Archive a package directory into an OVA.

    Args:
      directory (str): Package directory to archive.
      ova_path (str): OVA file to create (replaced atomically if it exists).
      strict (bool): See :class:`PackageDirectory`.

    Returns:
      list: Names of the archived files, in archive order.

    Raises:
      NoDescriptorFoundError: if the directory holds no descriptor.
      AmbiguousDescriptorError: if it holds several and ``strict``.
    """
    package = PackageDirectory(directory, strict=strict)
    members = package.archive_members()
    logger.notice("Creating %s from %s", ova_path, directory)

    (fd, tmp_path) = tempfile.mkstemp(
        prefix=TEMP_PREFIX, suffix='.ova',
        dir=os.path.dirname(os.path.abspath(ova_path)))
    os.close(fd)
    try:
        # Be sure to dereference any links to the actual file content!
        with tarfile.open(tmp_path, 'w', format=tarfile.USTAR_FORMAT,
                          dereference=True) as tarf:
            for name in members:
                logger.debug("Adding %s to %s", name, ova_path)
                tarf.add(os.path.join(package.path, name), arcname=name)
        os.replace(tmp_path, ova_path)
        tmp_path = None
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
    logger.info("Created %s", ova_path)
    return members
