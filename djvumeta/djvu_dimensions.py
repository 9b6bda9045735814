"""
Created on 2026-03-03

@author: wf
"""

import re
from dataclasses import field
from typing import List, Optional

from basemkit.yamlable import lod_storable

from djvumeta.djvu_tree import XmlNode


@lod_storable
class PageDimensions:
    """
    width and height of a single page in pixels
    """

    width: int = 0
    height: int = 0


@lod_storable
class DimensionInfo:
    """
    page count and the dimensions of each page of a DjVu document
    """

    page_count: int = 0
    # 0-indexed - None for pages without geometry
    dimensions_by_page: List[Optional[PageDimensions]] = field(default_factory=list)

    def get_page_dimensions(self, page: int) -> Optional[PageDimensions]:
        """
        get the dimensions of the given 1-indexed page

        Returns:
            the dimensions or None for an unknown page
        """
        index = page - 1
        if index < 0 or index >= len(self.dimensions_by_page):
            return None
        return self.dimensions_by_page[index]


class DimensionExtractor:
    """
    derive the DimensionInfo from a DjVuXML geometry tree
    """

    INT_PATTERN = re.compile(r"\s*([+-]?\d+)")

    @classmethod
    def to_int(cls, value: Optional[str]) -> int:
        """
        leading integer of the given attribute value, 0 if there is none
        """
        if value is None:
            return 0
        match = cls.INT_PATTERN.match(value)
        number = int(match.group(1)) if match else 0
        return number

    def get_page_dimensions(self, obj: Optional[XmlNode]) -> Optional[PageDimensions]:
        """
        get the dimensions of the given page OBJECT

        Returns:
            None for a missing object or an object without any geometry
        """
        if obj is None:
            return None
        width = obj.attribute("width")
        height = obj.attribute("height")
        if width is None and height is None:
            return None
        dims = PageDimensions(width=self.to_int(width), height=self.to_int(height))
        return dims

    def extract(self, meta_tree: Optional[XmlNode]) -> Optional[DimensionInfo]:
        """
        extract the dimension information from the given meta tree

        Args:
            meta_tree: the DjVuXML geometry tree

        Returns:
            the dimension info or None if there is no meta tree
        """
        if meta_tree is None:
            return None
        page_count = sum(1 for _obj in meta_tree.iter_descendants("OBJECT"))
        body = meta_tree.child("BODY")
        objects = body.children("OBJECT") if body is not None else []
        dimensions_by_page = []
        for i in range(page_count):
            obj = objects[i] if i < len(objects) else None
            dimensions_by_page.append(self.get_page_dimensions(obj))
        dimension_info = DimensionInfo(
            page_count=page_count, dimensions_by_page=dimensions_by_page
        )
        return dimension_info
