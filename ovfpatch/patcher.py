#!/usr/bin/env python
#
# patcher.py - Removal of device items from an OVF descriptor
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

"""Removal of hardware device items from an OVF descriptor.

A device item is an ``Item`` (or OVF 2.x ``StorageItem`` /
``EthernetPortItem``) element whose ``ResourceType`` child holds the
numeric CIM class of the device, such as 35 for a sound card.

**Exceptions**

.. autosummary::
  :nosignatures:

  DescriptorParseError

**Classes**

.. autosummary::
  :nosignatures:

  DocumentPatcher
  StructuredPatcher
  TextPatcher
  AutoPatcher

**Functions**

.. autosummary::
  :nosignatures:

  remove_devices_by_resource_type
  structured_parsing_available
"""

import importlib.util
import logging
import os
import re
import shutil
import xml.etree.ElementTree as ET

from ovfpatch.data_validation import (
    canonicalize_choice, validate_resource_type,
)
from ovfpatch.utilities import atomic_write
from ovfpatch.xml_file import XML, detect_encoding

logger = logging.getLogger(__name__)

SOUND_CARD = 35
"""CIM ResourceType of a sound card, the device removed by default."""

DEVICE_ITEM_TAGS = ('Item', 'StorageItem', 'EthernetPortItem')
"""Local tag names of elements describing a single virtual device."""

RESOURCE_TYPE_TAG = 'ResourceType'

PATCH_METHODS = ('auto', 'xml', 'text')


class DescriptorParseError(EnvironmentError):
    """The OVF descriptor is not well-formed XML."""


def structured_parsing_available():
    """Whether this interpreter was built with the expat XML parser.

    :mod:`xml.etree.ElementTree` cannot parse anything without it.

    Returns:
      bool: True if ``pyexpat`` can be imported.
    """
    return importlib.util.find_spec('pyexpat') is not None


class DocumentPatcher(object):
    """Abstract remover of device items from an OVF descriptor.

    Use :meth:`factory` to get the right implementation for this system.

    Args:
      resource_type (int): CIM ResourceType of the devices to remove.
    """

    method = None
    """Name of the patch method implemented by this class."""

    def __init__(self, resource_type=SOUND_CARD):
        """Create a patcher for the given device class."""
        self.resource_type = validate_resource_type(resource_type)

    @staticmethod
    def factory(method='auto', resource_type=SOUND_CARD):
        """Create the patcher implementing the requested method.

        Args:
          method (str): One of :data:`PATCH_METHODS`. ``auto`` picks the
              structured patcher (with a text fallback) if XML parsing is
              available, and the text patcher otherwise.
          resource_type (int): CIM ResourceType of the devices to remove.

        Returns:
          DocumentPatcher: Patcher instance.

        Raises:
          ValueUnsupportedError: if ``method`` is not recognized.
          NotImplementedError: if ``xml`` is requested but there is no
              XML parser in this interpreter.
        """
        method = canonicalize_choice("patch method", method, PATCH_METHODS)
        if method == 'text':
            return TextPatcher(resource_type)
        if not structured_parsing_available():
            if method == 'xml':
                raise NotImplementedError(
                    "This Python has no expat XML parser; use the 'text'"
                    " patch method instead")
            logger.warning("No XML parser available in this Python;"
                           " falling back to line-based device removal")
            return TextPatcher(resource_type)
        if method == 'xml':
            return StructuredPatcher(resource_type)
        return AutoPatcher(resource_type)

    def remove_devices(self, descriptor_path):
        """Remove all matching device items from the given descriptor.

        Args:
          descriptor_path (str): Path to the OVF descriptor to edit in place.

        Returns:
          int: Number of device items removed.
        """
        raise NotImplementedError("remove_devices not implemented")

    def __repr__(self):
        return "{0}(resource_type={1})".format(type(self).__name__,
                                               self.resource_type)


class StructuredPatcher(DocumentPatcher):
    """Remove device items by editing the parsed XML tree."""

    method = 'xml'

    def is_target(self, element):
        """Check whether the element is a device item of our resource type.

        Args:
          element (xml.etree.ElementTree.Element): Element to check
        Returns:
          bool: True if the element should be removed.
        """
        if XML.strip_ns(element.tag) not in DEVICE_ITEM_TAGS:
            return False
        expected = str(self.resource_type)
        for child in element:
            if (XML.strip_ns(child.tag) == RESOURCE_TYPE_TAG and
                    (child.text or "").strip() == expected):
                return True
        return False

    def remove_devices(self, descriptor_path):
        """Remove all matching device items from the given descriptor.

        The tree is walked completely before anything is detached. The file
        is only rewritten if at least one item was removed.

        Args:
          descriptor_path (str): Path to the OVF descriptor to edit in place.

        Returns:
          int: Number of device items removed.

        Raises:
          DescriptorParseError: if the descriptor is not well-formed XML.
          OSError: if the descriptor cannot be read or written.
        """
        logger.verbose("Parsing %s", descriptor_path)
        try:
            xml = XML(descriptor_path)
        except ET.ParseError as exc:
            raise DescriptorParseError(
                2, "XML error in parsing file: {0}"
                " (descriptor left unmodified)".format(exc), descriptor_path)

        doomed = []
        for parent in xml.root.iter():
            for child in parent:
                if self.is_target(child):
                    doomed.append((parent, child))

        for (parent, child) in doomed:
            logger.info("Removing %s with %s %s from %s",
                        XML.strip_ns(child.tag), RESOURCE_TYPE_TAG,
                        self.resource_type, XML.strip_ns(parent.tag))
            XML.remove_child(parent, child)

        if doomed:
            xml.write_xml()
        else:
            logger.verbose("No devices with %s %s found in %s",
                           RESOURCE_TYPE_TAG, self.resource_type,
                           descriptor_path)
        return len(doomed)


class TextPatcher(DocumentPatcher):
    """Remove device items by deleting line ranges from the descriptor.

    This is strictly best-effort. A device item is only deleted when its
    opening tag, its ``ResourceType`` marker, and its closing tag are laid
    out one per line with no other device item tags in between. If any
    marker cannot be matched to such a block, or the result would not be
    well-formed, the descriptor is left byte-for-byte unchanged.
    """

    method = 'text'

    _NAME = r"(?:[\w.-]+:)?(?:{0})".format("|".join(DEVICE_ITEM_TAGS))
    ITEM_OPEN = re.compile(r"^\s*<({0})(?:\s[^>]*)?>\s*$".format(_NAME))
    ITEM_CLOSE = re.compile(r"^\s*</({0})\s*>\s*$".format(_NAME))
    ANY_ITEM_TAG = re.compile(r"</?{0}[\s>/]".format(_NAME))
    TAG = re.compile(r"<(/?)[\w.:-]+(?:\s[^<>]*?)?(/?)>")

    def marker(self):
        """Regular expression matching our ResourceType element.

        Returns:
          re.Pattern: Compiled expression
        """
        return re.compile(
            r"<((?:[\w.-]+:)?{0})>\s*{1}\s*</\1\s*>"
            .format(RESOURCE_TYPE_TAG, self.resource_type))

    def find_block(self, lines, index, match):
        """Find the device item lines surrounding a ResourceType marker.

        Args:
          lines (list): Lines of the descriptor
          index (int): Index of the line holding the marker
          match (re.Match): Marker match within that line
        Returns:
          tuple: ``(first, last)`` line indices of the item, or None if no
          block can be safely identified.
        """
        if self.ANY_ITEM_TAG.search(lines[index]):
            return None

        first = None
        for i in range(index - 1, -1, -1):
            if self.ITEM_OPEN.match(lines[i]):
                first = i
                break
            if self.ANY_ITEM_TAG.search(lines[i]):
                return None
        last = None
        for i in range(index + 1, len(lines)):
            if self.ITEM_CLOSE.match(lines[i]):
                last = i
                break
            if self.ANY_ITEM_TAG.search(lines[i]):
                return None
        if first is None or last is None:
            return None
        if (self.ITEM_OPEN.match(lines[first]).group(1) !=
                self.ITEM_CLOSE.match(lines[last]).group(1)):
            return None

        # The marker must be a direct child of the item
        preceding = "".join(lines[first + 1:index]) + lines[index][
            :match.start()]
        depth = 0
        for tag in self.TAG.finditer(preceding):
            if tag.group(1):
                depth -= 1
            elif not tag.group(2):
                depth += 1
        if depth != 0:
            return None
        return (first, last)

    def remove_devices(self, descriptor_path):
        """Remove all matching device items from the given descriptor.

        A ``.backup`` copy of the descriptor is kept while the new contents
        are written, and restored if the write fails.

        Args:
          descriptor_path (str): Path to the OVF descriptor to edit in place.

        Returns:
          int: Number of device items removed (0 if the edit was declined).

        Raises:
          OSError: if the descriptor cannot be read or written.
        """
        with open(descriptor_path, 'rb') as fileobj:
            data = fileobj.read()
        encoding = detect_encoding(data)
        try:
            text = data.decode(encoding)
        except (LookupError, UnicodeDecodeError) as exc:
            logger.warning("Unable to decode %s as %s (%s); descriptor left"
                           " unmodified", descriptor_path, encoding, exc)
            return 0
        lines = text.splitlines(True)

        marker = self.marker()
        blocks = set()
        for (index, line) in enumerate(lines):
            match = marker.search(line)
            if not match:
                continue
            block = self.find_block(lines, index, match)
            if block is None:
                logger.warning("Unable to safely identify the device item"
                               " around line %d of %s; descriptor left"
                               " unmodified", index + 1, descriptor_path)
                return 0
            blocks.add(block)

        if not blocks:
            logger.verbose("No devices with %s %s found in %s",
                           RESOURCE_TYPE_TAG, self.resource_type,
                           descriptor_path)
            return 0

        doomed = set()
        for (first, last) in blocks:
            logger.info("Removing lines %d-%d of %s", first + 1, last + 1,
                        descriptor_path)
            doomed.update(range(first, last + 1))
        new_data = "".join(line for (index, line) in enumerate(lines)
                           if index not in doomed).encode(encoding)

        if structured_parsing_available():
            try:
                ET.fromstring(new_data)
            except ET.ParseError as exc:
                logger.warning("Line-based removal would leave %s malformed"
                               " (%s); descriptor left unmodified",
                               descriptor_path, exc)
                return 0

        backup = descriptor_path + ".backup"
        shutil.copy2(descriptor_path, backup)
        try:
            atomic_write(descriptor_path, new_data)
        except OSError:
            logger.error("Failed to write %s; restoring it from %s",
                         descriptor_path, backup)
            os.replace(backup, descriptor_path)
            raise
        os.remove(backup)
        return len(blocks)


class AutoPatcher(DocumentPatcher):
    """Structured removal, with line-based removal as a safe fallback."""

    method = 'auto'

    def __init__(self, resource_type=SOUND_CARD):
        """Create the structured patcher and its fallback."""
        super(AutoPatcher, self).__init__(resource_type)
        self.structured = StructuredPatcher(self.resource_type)
        self.fallback = TextPatcher(self.resource_type)

    def remove_devices(self, descriptor_path):
        """Remove all matching device items from the given descriptor.

        Args:
          descriptor_path (str): Path to the OVF descriptor to edit in place.

        Returns:
          int: Number of device items removed.

        Raises:
          DescriptorParseError: if the descriptor is not well-formed and the
              line-based fallback could not remove anything either.
          OSError: if the descriptor cannot be read or written.
        """
        try:
            return self.structured.remove_devices(descriptor_path)
        except DescriptorParseError as exc:
            logger.warning("%s: %s. Trying line-based removal instead.",
                           descriptor_path, exc.strerror)
            removed = self.fallback.remove_devices(descriptor_path)
            if removed:
                return removed
            raise


def remove_devices_by_resource_type(descriptor_path,
                                    resource_type=SOUND_CARD,
                                    method='auto'):
    """Remove every device item of the given class from a descriptor.

    Args:
      descriptor_path (str): Path to the OVF descriptor to edit in place.
      resource_type (int): CIM ResourceType of the devices to remove.
      method (str): One of :data:`PATCH_METHODS`.

    Returns:
      int: Number of device items removed.
    """
    patcher = DocumentPatcher.factory(method, resource_type)
    logger.debug("Using %r on %s", patcher, descriptor_path)
    return patcher.remove_devices(descriptor_path)
