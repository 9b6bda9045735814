"""
Created on 2026-03-02

@author: wf
"""

import json

from basemkit.basetest import Basetest

from djvumeta.djvu_metadata import (
    CorruptMetadataError,
    DjVuMetadata,
    MetadataError,
    MetadataXml,
)
from djvumeta.djvu_tree import MetadataParser


class TestDjVuMetadata(Basetest):
    """
    Test the DjVu metadata blob codec
    """

    def setUp(self, debug=False, profile=True):
        Basetest.setUp(self, debug=debug, profile=profile)
        self.xml = "<mw-djvu><DjVuXML><BODY/></DjVuXML></mw-djvu>"

    def test_encode_decode(self):
        """
        test both wrapper variants
        """
        for wrapper in [MetadataXml(xml=self.xml), MetadataError(error="x")]:
            blob = DjVuMetadata.encode(wrapper)
            if self.debug:
                print(blob)
            self.assertEqual(wrapper, DjVuMetadata.decode(blob))

    def test_decode_not_serialized(self):
        """
        strings that are no wrapper at all decode to None
        """
        for blob in ["<DjVuXML/>", "[1, 2]", '"text"', "not json"]:
            self.assertIsNone(DjVuMetadata.decode(blob), blob)

    def test_corrupt_wrapper(self):
        """
        a wrapper without xml and error is detected as corrupt
        """
        blob = json.dumps({"foo": "bar"})
        with self.assertRaises(CorruptMetadataError):
            DjVuMetadata.decode(blob)
        with self.assertRaises(CorruptMetadataError):
            DjVuMetadata.unwrap(blob)

    def test_xml_entry_of_wrong_type(self):
        """
        a wrapper whose xml entry is not a string is detected as corrupt
        """
        for xml in [5, ["<DjVuXML/>"], {"BODY": None}, True]:
            blob = json.dumps({"xml": xml})
            with self.subTest(xml=xml):
                with self.assertRaises(CorruptMetadataError):
                    DjVuMetadata.decode(blob)
                with self.assertRaises(CorruptMetadataError):
                    MetadataParser().parse(blob)
        self.assertIsNone(DjVuMetadata.unwrap(json.dumps({"xml": None})))

    def test_unwrap(self):
        """
        test unwrapping legacy, wrapped, failed and unserialized metadata
        """
        legacy = f'<?xml version="1.0" ?>\n{self.xml}'
        test_cases = [
            (legacy, legacy, "legacy raw XML"),
            (DjVuMetadata.encode(MetadataXml(xml=self.xml)), self.xml, "xml wrapper"),
            (DjVuMetadata.encode(MetadataError(error="x")), None, "error marker"),
            (self.xml, self.xml, "raw XML without declaration"),
            (None, None, "no metadata"),
        ]
        for blob, expected, description in test_cases:
            with self.subTest(description):
                self.assertEqual(expected, DjVuMetadata.unwrap(blob))

    def test_is_valid(self):
        """
        test the validity predicate
        """
        test_cases = [
            (DjVuMetadata.encode(MetadataError(error="x")), False),
            (DjVuMetadata.encode(MetadataXml(xml=self.xml)), True),
            (DjVuMetadata.EMPTY, False),
            ("", False),
            (None, False),
            ('<?xml version="1.0" ?><DjVuXML/>', True),
            (self.xml, True),
        ]
        for metadata, expected in test_cases:
            with self.subTest(metadata=metadata):
                self.assertEqual(expected, DjVuMetadata.is_valid(metadata))
