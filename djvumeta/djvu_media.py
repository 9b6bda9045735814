"""
Created on 2026-03-04

@author: wf
"""

import hashlib
import html
import json
import os
from dataclasses import field
from typing import Any, Dict, List, Optional, Tuple

from basemkit.yamlable import lod_storable


@lod_storable
class MediaFile:
    """
    a DjVu media file version with its stored metadata blob
    """

    name: str
    sha1: str
    size: int = 0
    path: Optional[str] = None
    metadata: Optional[str] = None
    handler_state: Dict[str, Any] = field(
        default_factory=dict,
        repr=False,
        compare=False,
        metadata={"exclude": True},
    )

    def get_handler_state(self, key: str) -> Any:
        return self.handler_state.get(key)

    def set_handler_state(self, key: str, value: Any):
        self.handler_state[key] = value

    @staticmethod
    def get_sha1(path: str, chunk_size: int = 1 << 20) -> str:
        """
        get the SHA-1 hex digest of the content of the given file
        """
        sha1 = hashlib.sha1()
        with open(path, "rb") as djvu_file:
            for chunk in iter(lambda: djvu_file.read(chunk_size), b""):
                sha1.update(chunk)
        return sha1.hexdigest()

    @classmethod
    def get_sample_xml(
        cls,
        dimensions: Optional[List[Optional[Tuple[int, int]]]] = None,
        texts: Optional[List[str]] = None,
    ) -> str:
        """
        Returns sample XML metadata as djvutoxml and djvutxt would produce it.

        Args:
            dimensions: width and height per page - None for a page without geometry
            texts: page texts - without texts a bare DjVuXML tree is returned
        """
        if dimensions is None:
            dimensions = [(2829, 4194), (2829, 4194), (2835, 4200)]
        objects = ""
        for index, dims in enumerate(dimensions):
            geometry = f' width="{dims[0]}" height="{dims[1]}"' if dims else ""
            objects += (
                f'<OBJECT data="file://localhost/sample.djvu" type="image/x.djvu" '
                f'usemap="p{index + 1:04d}.djvu"{geometry}>\n'
                f'<PARAM name="PAGE" value="p{index + 1:04d}.djvu" />\n'
                f'<PARAM name="DPI" value="216" />\n'
                f"</OBJECT>\n"
            )
        meta_xml = f"<DjVuXML>\n<HEAD></HEAD>\n<BODY>\n{objects}</BODY>\n</DjVuXML>\n"
        if texts is None:
            return meta_xml
        pages = "".join(f'<PAGE value="{html.escape(text)}" />\n' for text in texts)
        text_xml = f"<DjVuTxt>\n<HEAD></HEAD>\n<BODY>\n{pages}</BODY>\n</DjVuTxt>\n"
        xml = f"<mw-djvu>{meta_xml}{text_xml}</mw-djvu>"
        return xml

    @classmethod
    def get_sample(cls, metadata: Optional[str] = None) -> "MediaFile":
        """Returns a sample MediaFile instance for testing."""
        if metadata is None:
            metadata = json.dumps(
                {"xml": cls.get_sample_xml(texts=["Vorwort", "Seite 2", ""])}
            )
        sample_file = cls(
            name="AB1951-Suenninghausen.djvu",
            sha1=hashlib.sha1(metadata.encode("utf-8")).hexdigest(),
            size=66327,
            metadata=metadata,
        )
        return sample_file

    @classmethod
    def from_path(cls, path: str, metadata: Optional[str] = None) -> "MediaFile":
        """
        create a media file for the DjVu file at the given path

        Args:
            path: path of the DjVu file
            metadata: the stored metadata blob if already known
        """
        media_file = cls(
            name=os.path.basename(path),
            sha1=cls.get_sha1(path),
            size=os.path.getsize(path),
            path=path,
            metadata=metadata,
        )
        return media_file
