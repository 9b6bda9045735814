"""
Created on 2026-03-03

DjVu XML metadata trees

@author: wf
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from lxml import etree

from djvumeta.djvu_metadata import DjVuMetadata

logger = logging.getLogger(__name__)


class XmlNode:
    """
    read only view of an XML element
    """

    def __init__(self, element: etree._Element):
        self.element = element

    def __repr__(self) -> str:
        return f"XmlNode({self.tag_name})"

    @property
    def tag_name(self) -> str:
        return self.element.tag

    @property
    def text(self) -> str:
        text = self.element.text or ""
        return text

    def attribute(self, name: str) -> Optional[str]:
        return self.element.get(name)

    def children(self, tag: Optional[str] = None) -> List["XmlNode"]:
        """
        get my element children - comments and processing instructions are skipped

        Args:
            tag: if given only children with this tag name
        """
        children = [
            XmlNode(child)
            for child in self.element
            if isinstance(child.tag, str) and (tag is None or child.tag == tag)
        ]
        return children

    def child(self, tag: str, index: int = 0) -> Optional["XmlNode"]:
        """
        get the index-th child with the given tag name

        Returns:
            the child node or None if there is no such child
        """
        if index < 0:
            return None
        for child in self.element.iterchildren(tag):
            if index == 0:
                return XmlNode(child)
            index -= 1
        return None

    def iter_descendants(self, tag: str) -> Iterator["XmlNode"]:
        """
        iterate over all descendants with the given tag name in document order
        """
        for element in self.element.iterdescendants(tag):
            yield XmlNode(element)


@dataclass
class DjVuTrees:
    """
    the geometry and text trees of a DjVu metadata document
    """

    meta_tree: Optional[XmlNode] = None
    text_tree: Optional[XmlNode] = None


class MetadataParser:
    """
    parser for DjVu XML metadata as produced by djvutoxml/djvutxt
    """

    WRAPPER_TAG = "mw-djvu"
    TEXT_TAG = "DjVuTxt"
    META_TAG = "DjVuXML"

    def __init__(self):
        # scanned books may exceed the libxml2 default limits
        self.xml_parser = etree.XMLParser(huge_tree=True)

    def parse(self, blob: Optional[str]) -> Optional[DjVuTrees]:
        """
        parse the given metadata blob

        Args:
            blob: raw XML or a stored metadata wrapper

        Returns:
            the trees or None if the metadata is invalid

        Raises:
            CorruptMetadataError: for a wrapper without xml or error entry
        """
        xml = DjVuMetadata.unwrap(blob)
        if not DjVuMetadata.is_valid(xml):
            logger.debug("DjVu XML metadata is invalid or missing")
            return None
        trees = self.extract_trees(xml)
        return trees

    def parse_xml(self, xml: str) -> Optional[XmlNode]:
        """
        parse the given XML string

        Returns:
            the root node or None if the XML is bogus
        """
        try:
            root = etree.fromstring(xml.encode("utf-8"), parser=self.xml_parser)
        except (etree.XMLSyntaxError, ValueError) as ex:
            logger.warning("Bogus multipage XML metadata: %s", ex)
            return None
        return XmlNode(root)

    def extract_trees(self, xml: str) -> Optional[DjVuTrees]:
        """
        extract the meta and text tree from the given XML metadata

        Returns:
            the trees or None if the XML can not be parsed
        """
        root = self.parse_xml(xml)
        if root is None:
            return None
        trees = DjVuTrees()
        if root.tag_name == self.WRAPPER_TAG:
            for child in root.children():
                if child.tag_name == self.TEXT_TAG and trees.text_tree is None:
                    trees.text_tree = child
                elif child.tag_name == self.META_TAG and trees.meta_tree is None:
                    trees.meta_tree = child
        else:
            trees.meta_tree = root
        return trees
