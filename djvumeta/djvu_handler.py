"""
Created on 2026-03-05

@author: wf
"""

import logging
import mimetypes
import re
from typing import Any, Dict, Optional, Tuple

from djvumeta.djvu_cache import MemoryObjectCache, ObjectCache
from djvumeta.djvu_config import DjVuMetaConfig
from djvumeta.djvu_dimensions import DimensionExtractor, DimensionInfo, PageDimensions
from djvumeta.djvu_media import MediaFile
from djvumeta.djvu_metadata import DjVuMetadata, MetadataError, MetadataXml
from djvumeta.djvu_retriever import DjVuMetadataRetriever
from djvumeta.djvu_tree import DjVuTrees, MetadataParser, XmlNode

logger = logging.getLogger(__name__)


class DjVuHandler:
    """
    handler for DjVu media files: metadata, page count, page dimensions and page text
    """

    METADATA_TYPE = "djvuxml"
    # key for the per file handler state
    STATE_TREES = "djvuTrees"
    PARAM_STRING_PATTERN = re.compile(r"^page(\d+)-(\d+)px$")

    def __init__(
        self,
        config: DjVuMetaConfig = None,
        cache: ObjectCache = None,
        cache_key_prefix: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        retriever: DjVuMetadataRetriever = None,
    ):
        """
        Initialize the DjVu handler.

        Args:
            config: configuration - the default instance if None
            cache: cache for the dimension info - an in memory cache if None
            cache_key_prefix: first component of the dimension cache keys
            cache_ttl: time to live of the dimension info, 0 for indefinite
            retriever: metadata retriever for files without stored metadata
        """
        if config is None:
            config = DjVuMetaConfig.get_instance()
        self.config = config
        self.cache = cache if cache is not None else MemoryObjectCache()
        self.cache_key_prefix = (
            cache_key_prefix if cache_key_prefix is not None else config.cache_key_prefix
        )
        self.cache_ttl = cache_ttl if cache_ttl is not None else config.cache_ttl
        self.retriever = retriever or DjVuMetadataRetriever(config=config)
        self.parser = MetadataParser()
        self.extractor = DimensionExtractor()

    def is_enabled(self) -> bool:
        if not self.config.djvu_renderer or (
            not self.config.djvu_dump and not self.config.djvu_to_xml
        ):
            logger.debug("DjVu is disabled, please set djvu_renderer and djvu_dump")
            return False
        return True

    def must_render(self, media_file: MediaFile = None) -> bool:
        return True

    def is_multi_page(self, media_file: MediaFile = None) -> bool:
        return True

    def is_expensive_to_thumbnail(self, media_file: MediaFile) -> bool:
        """
        True if creating thumbnails from the file is large or otherwise resource-intensive.
        """
        return media_file.size > self.config.expensive_size_limit

    def get_param_map(self) -> Dict[str, str]:
        return {
            "img_width": "width",
            "img_page": "page",
        }

    def validate_param(self, name: str, value: Any) -> bool:
        """
        validate the given thumbnail parameter

        Args:
            name: width, height or page
            value: the parameter value

        Returns:
            True if the value is a positive number
        """
        if name == "page":
            text = str(value).strip()
            if text != str(DimensionExtractor.to_int(text)):
                # extra junk on the end of page, probably actually a caption
                # e.g. [[File:Foo.djvu|thumb|Page 3 of the document shows foo]]
                return False
        if name not in ("width", "height", "page"):
            return False
        try:
            number = float(value)
        except (TypeError, ValueError):
            return False
        return number > 0

    def make_param_string(self, params: Dict[str, Any]) -> Optional[str]:
        page = params.get("page", 1)
        if params.get("width") is None:
            return None
        return f"page{page}-{params['width']}px"

    def parse_param_string(self, param_string: str) -> Optional[Dict[str, int]]:
        match = self.PARAM_STRING_PATTERN.match(param_string)
        if not match:
            return None
        params = {"width": int(match.group(2)), "page": int(match.group(1))}
        return params

    def get_thumb_type(self) -> Tuple[str, Optional[str]]:
        """
        get the extension and mime type of rendered thumbnails
        """
        ext = self.config.djvu_output_extension
        mime, _encoding = mimetypes.guess_type(f"thumbnail.{ext}")
        return ext, mime

    def get_metadata_type(self, media_file: MediaFile = None) -> str:
        return self.METADATA_TYPE

    def get_metadata(self, path: str) -> str:
        """
        extract the metadata blob for the DjVu file at the given path

        Returns:
            the serialized xml wrapper or the error marker
        """
        logger.debug("Getting DjVu metadata for %s", path)
        xml = self.retriever.retrieve_metadata(path)
        if xml is None:
            # special value so that we don't repetitively try to decode a broken file
            wrapper = MetadataError(error=DjVuMetadata.EXTRACTION_ERROR)
        else:
            wrapper = MetadataXml(xml=xml)
        blob = DjVuMetadata.encode(wrapper)
        return blob

    def get_file_metadata(self, media_file: MediaFile) -> Optional[str]:
        """
        get the stored metadata of the given file, extracting it on first use
        """
        if media_file.metadata is None and media_file.path:
            media_file.metadata = self.get_metadata(media_file.path)
        return media_file.metadata

    def is_metadata_valid(self, metadata: Optional[str]) -> bool:
        return DjVuMetadata.is_valid(metadata)

    def get_trees(self, media_file: MediaFile) -> Optional[DjVuTrees]:
        """
        get the parsed trees of the given file cached in its handler state

        Returns:
            the trees or None if the metadata is invalid
        """
        trees = media_file.get_handler_state(self.STATE_TREES)
        if trees is not None:
            return trees
        metadata = self.get_file_metadata(media_file)
        xml = DjVuMetadata.unwrap(metadata)
        if not self.is_metadata_valid(xml):
            logger.debug(
                "DjVu XML metadata of %s is invalid or missing", media_file.name
            )
            return None
        trees = self.parser.extract_trees(xml)
        if trees is None:
            # remember the failure to avoid further attempts
            trees = DjVuTrees()
        media_file.set_handler_state(self.STATE_TREES, trees)
        return trees

    def get_meta_tree(
        self, media_file: MediaFile, gettext: bool = False
    ) -> Optional[XmlNode]:
        """
        get the geometry tree or with gettext the text tree of the given file
        """
        trees = self.get_trees(media_file)
        if trees is None:
            return None
        tree = trees.text_tree if gettext else trees.meta_tree
        return tree

    def get_dimension_info_from_meta_tree(
        self, meta_tree: Optional[XmlNode]
    ) -> Optional[DimensionInfo]:
        return self.extractor.extract(meta_tree)

    def get_dimension_info(self, media_file: MediaFile) -> Optional[DimensionInfo]:
        """
        get the dimension info of the given file via the cache keyed by content hash
        """

        def compute() -> Optional[Dict[str, Any]]:
            meta_tree = self.get_meta_tree(media_file)
            info = self.get_dimension_info_from_meta_tree(meta_tree)
            record = info.to_dict() if info is not None else None
            return record

        key = self.cache.make_key(self.cache_key_prefix, "dimensions", media_file.sha1)
        record = self.cache.get_with_set_callback(
            key,
            self.cache_ttl,
            compute,
            process_ttl=ObjectCache.TTL_INDEFINITE,
        )
        if record is None:
            return None
        info = DimensionInfo.from_dict(record)  # @UndefinedVariable
        return info

    def page_count(self, media_file: MediaFile) -> Optional[int]:
        info = self.get_dimension_info(media_file)
        return info.page_count if info is not None else None

    def get_page_dimensions(
        self, media_file: MediaFile, page: int
    ) -> Optional[PageDimensions]:
        """
        get the dimensions of the given 1-indexed page

        Returns:
            the dimensions or None if not available
        """
        info = self.get_dimension_info(media_file)
        if info is None:
            return None
        return info.get_page_dimensions(page)

    def get_image_size(self, media_file: MediaFile) -> Optional[Tuple[int, int]]:
        """
        get the size of the first page as width and height
        """
        dims = self.get_page_dimensions(media_file, 1)
        if dims is None:
            return None
        return dims.width, dims.height

    def get_page_text(self, media_file: MediaFile, page: int) -> Optional[str]:
        """
        get the text of the given 1-indexed page

        Returns:
            the page text or None when no text was found
        """
        tree = self.get_meta_tree(media_file, gettext=True)
        if tree is None:
            return None
        body = tree.child("BODY")
        if body is None:
            return None
        page_node = body.child("PAGE", page - 1)
        if page_node is None:
            return None
        return page_node.attribute("value") or ""
