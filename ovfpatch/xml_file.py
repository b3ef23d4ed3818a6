#!/usr/bin/env python
#
# xml_file.py - class for reading and rewriting OVF descriptor XML
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

"""Reading, editing, and writing XML files without losing their prefixes.

**Functions**

.. autosummary::
  :nosignatures:

  detect_encoding

**Classes**

.. autosummary::
  :nosignatures:

  XML
"""

import io
import logging
import re
import xml.etree.ElementTree as ET

from ovfpatch.utilities import atomic_write

logger = logging.getLogger(__name__)

_DECLARED_ENCODING = re.compile(
    br"""^(?:\xef\xbb\xbf)?\s*<\?xml[^>]*?"""
    br"""encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")


def detect_encoding(data):
    """Get the encoding named in the XML declaration, if any.

    Args:
      data (bytes): Raw file contents.
    Returns:
      str: Declared encoding, or ``"utf-8"`` if none is declared.
    Examples:
      ::

        >>> detect_encoding(b"<?xml version='1.0' encoding='UTF-8'?><a/>")
        'UTF-8'
        >>> detect_encoding(b'<?xml version="1.0" encoding="latin-1"?><a/>')
        'latin-1'
        >>> detect_encoding(b"<a/>")
        'utf-8'
    """
    match = _DECLARED_ENCODING.match(data)
    if match:
        return match.group(1).decode('ascii')
    return 'utf-8'


class XML(object):
    """Class capable of reading, editing, and writing XML files.

    Every namespace declared in the file is registered with ElementTree
    before parsing, so that serialization reuses the original prefixes
    instead of inventing ``ns0``-style ones. Comments are kept in the tree.
    """

    @staticmethod
    def get_ns(text):
        """Get the namespace prefix from an XML element or attribute name.

        Args:
          text (str): Element name or attribute name, such as
              "{http://schemas.dmtf.org/ovf/envelope/1}Element".
        Returns:
          str: "" if no prefix is present, or a namespace URI, such as
          "http://schemas.dmtf.org/ovf/envelope/1".
        """
        match = re.match(r"\{(.*)\}", str(text))
        if not match:
            return ""
        return match.group(1)

    @staticmethod
    def strip_ns(text):
        """Remove a namespace prefix from an XML element or attribute name.

        Args:
          text (str): Element name or attribute name, such as
              "{http://schemas.dmtf.org/ovf/envelope/1}Element".
        Returns:
          str: Bare name, such as "Element".

        Examples:
          ::

            >>> XML.strip_ns("{http://schemas.dmtf.org/ovf/envelope/1}Item")
            'Item'
            >>> XML.strip_ns("Item")
            'Item'
        """
        match = re.match(r"\{.*\}(.*)", str(text))
        if not match:
            return text
        return match.group(1)

    @staticmethod
    def declared_namespaces(source):
        """List every namespace declaration in the source, in document order.

        Args:
          source (object): File path or binary file object to scan.
        Returns:
          list: (prefix, URI) pairs; the default namespace has prefix "".
        Raises:
          xml.etree.ElementTree.ParseError: if the source is not well-formed
        """
        return [ns for (_, ns) in ET.iterparse(source, events=['start-ns'])]

    @staticmethod
    def register_namespaces(declarations):
        """Register the given namespace declarations with ElementTree.

        A URI declared both as the default namespace and under a named
        prefix (common in OVF, where ``ovf:`` attributes sit alongside
        unprefixed elements) is registered under the named prefix, as
        attributes cannot be serialized into a default namespace.

        Args:
          declarations (list): (prefix, URI) pairs from
              :meth:`declared_namespaces`.
        Returns:
          dict: Mapping of prefix to namespace URI that was registered.
        """
        chosen = {}
        for (prefix, uri) in declarations:
            if uri not in chosen or (prefix and not chosen[uri]):
                chosen[uri] = prefix
        registered = {}
        for (uri, prefix) in chosen.items():
            try:
                ET.register_namespace(prefix, uri)
            except ValueError as exc:
                # ElementTree reserves "ns0", "ns1", ... for itself
                logger.debug("Not registering prefix '%s' for %s: %s",
                             prefix, uri, exc)
                continue
            registered[prefix] = uri
        logger.spam("Registered namespaces: %s", registered)
        return registered

    @staticmethod
    def remove_child(parent, child):
        """Detach ``child`` from ``parent`` keeping surrounding whitespace.

        The whitespace that followed the removed child is handed to the
        preceding sibling (or to the parent's text if the child was first),
        so the closing tag of the parent keeps its indentation.

        Args:
          parent (xml.etree.ElementTree.Element): Parent element
          child (xml.etree.ElementTree.Element): Child element to remove

        Examples:
          ::

            >>> root = ET.fromstring("<a>\\n  <b/>\\n  <c/>\\n</a>")
            >>> XML.remove_child(root, root[1])
            >>> ET.tostring(root)
            b'<a>\\n  <b />\\n</a>'
        """
        children = list(parent)
        index = children.index(child)
        if index > 0:
            children[index - 1].tail = child.tail
        else:
            parent.text = child.tail
        parent.remove(child)

    def __init__(self, xml_file):
        """Read the given XML file and store it in memory.

        The memory representation is available as properties :attr:`tree` and
        :attr:`root`.

        Args:
          xml_file (str): File path to read.

        Raises:
          xml.etree.ElementTree.ParseError: if parsing fails
          OSError: if the file cannot be read
        """
        self.path = xml_file
        """Path the XML was read from, and by default is written back to."""
        with open(xml_file, 'rb') as fileobj:
            data = fileobj.read()
        self.encoding = detect_encoding(data)
        """Encoding named by the input's XML declaration."""
        self.declarations = self.declared_namespaces(io.BytesIO(data))
        """(prefix, URI) pairs declared by the input, in document order."""
        self.namespaces = self.register_namespaces(self.declarations)
        """Mapping of prefix to URI registered for serialization."""

        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
        parser.feed(data)
        self.root = parser.close()
        """Root :class:`xml.etree.ElementTree.Element` instance of the tree."""
        self.tree = ET.ElementTree(self.root)
        """:class:`xml.etree.ElementTree.ElementTree` describing this file."""

    def unused_declarations(self):
        """Find input declarations that ElementTree would not write back.

        ElementTree only declares the namespaces that some element or
        attribute name uses, so prefixes that appear only inside attribute
        values (``xsi:type="cim:..."``) or not at all would be lost.

        Returns:
          list: (prefix, URI) pairs to declare on the root element by hand.
        """
        used = set()
        for elem in self.root.iter():
            if isinstance(elem.tag, str):
                used.add(self.get_ns(elem.tag))
            used.update(self.get_ns(key) for key in elem.attrib)
        written = set(prefix for (prefix, uri) in self.namespaces.items()
                      if uri in used)
        missing = []
        for (prefix, uri) in self.declarations:
            if prefix in written or re.match(r"ns\d+$", prefix):
                continue
            written.add(prefix)
            missing.append((prefix, uri))
        return missing

    def to_bytes(self):
        """Serialize the tree with an XML declaration in the input encoding.

        Every prefix the input declared is declared again in the output.

        Returns:
          bytes: Serialized document, ending with a newline.
        """
        extra = [("xmlns:" + prefix if prefix else "xmlns", uri)
                 for (prefix, uri) in self.unused_declarations()]
        for (name, uri) in extra:
            self.root.set(name, uri)
        buf = io.BytesIO()
        try:
            self.tree.write(buf, xml_declaration=True,
                            encoding=self.encoding)
        finally:
            for (name, _) in extra:
                del self.root.attrib[name]
        data = buf.getvalue()
        if not data.endswith(b"\n"):
            data += b"\n"
        return data

    def write_xml(self, xml_file=None):
        """Write the XML out to the given file, atomically.

        Args:
          xml_file (str): Filename to write to. Defaults to :attr:`path`.
        Raises:
          OSError: if the file cannot be written; the previous contents
              of the file are left intact in that case.
        """
        if xml_file is None:
            xml_file = self.path
        logger.verbose("Writing XML to %s", xml_file)
        atomic_write(xml_file, self.to_bytes())


if __name__ == "__main__":   # pragma: no cover
    import doctest
    doctest.testmod()
