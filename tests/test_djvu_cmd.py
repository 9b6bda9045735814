"""
Created on 2026-03-06

@author: wf
"""

import os
import tempfile
from unittest.mock import MagicMock

from basemkit.basetest import Basetest

from djvumeta.djvu_cache import MemoryObjectCache
from djvumeta.djvu_cmd import DjVuMetaCmd
from djvumeta.djvu_config import DjVuMetaConfig
from djvumeta.djvu_handler import DjVuHandler
from djvumeta.djvu_media import MediaFile


class TestDjVuMetaCmd(Basetest):
    """
    Test the djvumeta command line
    """

    def setUp(self, debug=False, profile=True):
        Basetest.setUp(self, debug=debug, profile=profile)
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.djvu_path = os.path.join(self.tmp_dir.name, "sample.djvu")
        with open(self.djvu_path, "wb") as djvu_file:
            djvu_file.write(b"AT&TFORM\x00\x00\x00\x10DJVM")
        self.retriever = MagicMock()
        self.retriever.retrieve_metadata.return_value = MediaFile.get_sample_xml(
            dimensions=[(2829, 4194), None], texts=["Titelblatt", "Inhalt"]
        )
        config = DjVuMetaConfig(cache_path=os.path.join(self.tmp_dir.name, "cache"))
        self.handler = DjVuHandler(
            config=config, cache=MemoryObjectCache(), retriever=self.retriever
        )
        self.cmd = DjVuMetaCmd.__new__(DjVuMetaCmd)
        self.cmd.config = config

    def tearDown(self):
        self.tmp_dir.cleanup()
        Basetest.tearDown(self)

    def test_from_path(self):
        media_file = MediaFile.from_path(self.djvu_path)
        self.assertEqual("sample.djvu", media_file.name)
        self.assertEqual(16, media_file.size)
        self.assertEqual(40, len(media_file.sha1))

    def test_show_info(self):
        table = self.cmd.show_info(self.handler, self.djvu_path, "github")
        if self.debug:
            print(table)
        self.assertIn("2829", table)
        self.assertIn("4194", table)

    def test_show_text(self):
        text = self.cmd.show_text(self.handler, self.djvu_path, 2)
        self.assertEqual("Inhalt", text)
        self.assertIsNone(self.cmd.show_text(self.handler, self.djvu_path, 3))

    def test_show_metadata(self):
        blob = self.cmd.show_metadata(self.handler, self.djvu_path)
        self.assertTrue(self.handler.is_metadata_valid(blob))

    def test_get_handler(self):
        args = MagicMock(cache=True)
        handler = self.cmd.get_handler(args)
        self.assertTrue(os.path.isdir(self.cmd.config.cache_path))
        self.assertIsNotNone(handler.cache)
