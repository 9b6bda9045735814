"""
Created on 2026-03-05

@author: wf
"""

import subprocess
from unittest.mock import patch

from basemkit.basetest import Basetest

from djvumeta.djvu_config import DjVuMetaConfig
from djvumeta.djvu_handler import DjVuHandler
from djvumeta.djvu_media import MediaFile
from djvumeta.djvu_retriever import DjVuMetadataRetriever
from djvumeta.djvu_tree import MetadataParser


class TestDjVuMetadataRetriever(Basetest):
    """
    Test retrieving metadata with the DjVuLibre tools
    """

    def setUp(self, debug=False, profile=True):
        Basetest.setUp(self, debug=debug, profile=profile)
        self.config = DjVuMetaConfig(cache_path="/tmp/djvumeta/cache")
        self.retriever = DjVuMetadataRetriever(config=self.config)
        self.meta_xml = (
            '<?xml version="1.0" ?>\n'
            '<!DOCTYPE DjVuXML PUBLIC "-//W3C//DTD DjVuXML 1.1//EN" "pubtext/DjVuXML-s.dtd">\n'
            + MediaFile.get_sample_xml(dimensions=[(2829, 4194), (2835, 4200)])
        )
        self.txt = (
            '(page 0 0 2829 4194 "Adre\\303\\237buch \\"1951\\"\\nS\\303\\274nninghausen")\n'
            "()\n"
        )

    def completed(self, cmd, stdout: str, returncode: int = 0):
        proc = subprocess.CompletedProcess(
            cmd, returncode, stdout=stdout.encode("utf-8"), stderr=b"failure"
        )
        return proc

    def fake_run(self, cmd, **kwargs):
        if cmd[0] == "djvutoxml":
            return self.completed(cmd, self.meta_xml)
        if cmd[0] == "djvutxt":
            self.assertIn("--detail=page", cmd)
            return self.completed(cmd, self.txt)
        raise FileNotFoundError(cmd[0])

    def test_unescape(self):
        test_cases = [
            ("Adre\\303\\237buch", "Adreßbuch"),
            ('\\"quoted\\"', '"quoted"'),
            ("line\\nbreak", "line\nbreak"),
            ("back\\\\slash", "back\\slash"),
            ("\\x41", "A"),
            ("plain", "plain"),
        ]
        for text, expected in test_cases:
            with self.subTest(text=text):
                self.assertEqual(expected, DjVuMetadataRetriever.unescape(text))

    def test_convert_text_to_xml(self):
        xml = DjVuMetadataRetriever.convert_text_to_xml(self.txt)
        if self.debug:
            print(xml)
        self.assertIn('<PAGE value="Adreßbuch &quot;1951&quot;&#10;S', xml)
        self.assertIn('<PAGE value="" />', xml)
        self.assertTrue(xml.startswith("<DjVuTxt>"))

    def test_retrieve_metadata(self):
        """
        the geometry and text output are combined in a mw-djvu tree
        """
        with patch("subprocess.run", side_effect=self.fake_run):
            xml = self.retriever.retrieve_metadata("/tmp/sample.djvu")
        trees = MetadataParser().parse(xml)
        self.assertEqual("DjVuXML", trees.meta_tree.tag_name)
        pages = trees.text_tree.child("BODY").children("PAGE")
        self.assertEqual(2, len(pages))
        self.assertEqual('Adreßbuch "1951"\nSünninghausen', pages[0].attribute("value"))
        self.assertEqual("", pages[1].attribute("value"))

    def test_retrieve_without_text_tool(self):
        self.config.djvu_txt = None
        with patch("subprocess.run", side_effect=self.fake_run):
            xml = self.retriever.retrieve_metadata("/tmp/sample.djvu")
        trees = MetadataParser().parse(xml)
        self.assertEqual("DjVuXML", trees.meta_tree.tag_name)
        self.assertIsNone(trees.text_tree)

    def test_retrieve_failures(self):
        """
        tool failures give None instead of raising
        """
        with patch(
            "subprocess.run",
            side_effect=lambda cmd, **kwargs: self.completed(cmd, "", returncode=1),
        ):
            self.assertIsNone(self.retriever.retrieve_metadata("/tmp/sample.djvu"))
        with patch("subprocess.run", side_effect=FileNotFoundError("djvutoxml")):
            self.assertIsNone(self.retriever.retrieve_metadata("/tmp/sample.djvu"))
        with patch(
            "subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="djvutoxml", timeout=1),
        ):
            self.assertIsNone(self.retriever.retrieve_metadata("/tmp/sample.djvu"))
        self.config.djvu_to_xml = None
        self.assertIsNone(self.retriever.retrieve_metadata("/tmp/sample.djvu"))

    def test_handler_page_text(self):
        """
        the handler serves page count and text of retrieved metadata
        """
        handler = DjVuHandler(config=self.config, retriever=self.retriever)
        media_file = MediaFile(name="sample.djvu", sha1="s1", path="/tmp/sample.djvu")
        with patch("subprocess.run", side_effect=self.fake_run):
            self.assertEqual(2, handler.page_count(media_file))
        self.assertEqual(
            'Adreßbuch "1951"\nSünninghausen', handler.get_page_text(media_file, 1)
        )
        self.assertEqual((2829, 4194), handler.get_image_size(media_file))
