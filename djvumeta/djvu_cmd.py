"""
Created on 2026-03-06

@author: wf
"""

import argparse
import logging
from argparse import ArgumentParser, Namespace
from typing import List, Optional

from basemkit.base_cmd import BaseCmd
from tabulate import tabulate

from djvumeta.djvu_cache import JsonFileObjectCache, MemoryObjectCache
from djvumeta.djvu_config import DjVuMetaConfig
from djvumeta.djvu_handler import DjVuHandler
from djvumeta.djvu_media import MediaFile
from djvumeta.version import Version

logger = logging.getLogger(__name__)


class DjVuMetaCmd(BaseCmd):
    """
    Command-line tool for DjVu metadata, page dimensions and page text
    """

    def __init__(self, args: argparse.Namespace = None):
        """
        Initialize the DjVu metadata command.

        Args:
            args: Parsed command-line arguments
        """
        super().__init__(Version())
        self.args = args
        self.config = DjVuMetaConfig.get_instance()

    def add_arguments(self, parser: ArgumentParser) -> ArgumentParser:
        """
        Add DjVu metadata specific arguments.

        Args:
            parser: ArgumentParser to add arguments to

        Returns:
            The modified ArgumentParser
        """
        super().add_arguments(parser)
        parser.add_argument(
            "--metadata",
            metavar="PATH",
            help="extract and show the metadata blob of the given DjVu file",
        )
        parser.add_argument(
            "--info",
            metavar="PATH",
            help="show the page count and page dimensions of the given DjVu file",
        )
        parser.add_argument(
            "--text",
            metavar="PATH",
            help="show the text of the given DjVu file's --page",
        )
        parser.add_argument(
            "--page",
            type=int,
            default=1,
            help="1-indexed page number for --text [default: %(default)s]",
        )
        parser.add_argument(
            "--cache",
            action="store_true",
            help="use the JSON file cache in the configured cache_path",
        )
        parser.add_argument(
            "--format",
            default="simple",
            metavar="FMT",
            help="tabulate table format for --info output [default: %(default)s]",
        )
        return parser

    def get_handler(self, args: Namespace) -> DjVuHandler:
        """
        get a handler with the cache selected by the arguments
        """
        if getattr(args, "cache", False):
            cache = JsonFileObjectCache(self.config.cache_path)
        else:
            cache = MemoryObjectCache()
        handler = DjVuHandler(config=self.config, cache=cache)
        return handler

    def show_metadata(self, handler: DjVuHandler, path: str) -> str:
        blob = handler.get_metadata(path)
        print(blob)
        return blob

    def show_info(self, handler: DjVuHandler, path: str, fmt: str) -> Optional[str]:
        """
        show the page count and a table of the page dimensions

        Returns:
            the rendered table or None if no dimension info is available
        """
        media_file = MediaFile.from_path(path)
        info = handler.get_dimension_info(media_file)
        if info is None:
            print(f"{path}: no dimension info available")
            return None
        rows = []
        for index, dims in enumerate(info.dimensions_by_page):
            rows.append(
                {
                    "page": index + 1,
                    "width": dims.width if dims else None,
                    "height": dims.height if dims else None,
                }
            )
        table = tabulate(rows, headers="keys", tablefmt=fmt)
        print(f"{path}: {info.page_count} pages")
        print(table)
        return table

    def show_text(self, handler: DjVuHandler, path: str, page: int) -> Optional[str]:
        media_file = MediaFile.from_path(path)
        text = handler.get_page_text(media_file, page)
        if text is None:
            print(f"{path}: no text for page {page}")
        else:
            print(text)
        return text

    def handle_args(self, args: Namespace) -> bool:
        """
        Handle parsed arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            True if handled
        """
        handled = super().handle_args(args)
        if getattr(args, "debug", False):
            logging.basicConfig(level=logging.DEBUG)
        if args.metadata or args.info or args.text:
            handler = self.get_handler(args)
            if args.metadata:
                self.show_metadata(handler, args.metadata)
            if args.info:
                self.show_info(handler, args.info, args.format)
            if args.text:
                self.show_text(handler, args.text, args.page)
            handled = True
        return handled


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the DjVu metadata tool.

    Args:
        argv: Command-line arguments (defaults to sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    return DjVuMetaCmd.main(argv)


if __name__ == "__main__":
    main()
