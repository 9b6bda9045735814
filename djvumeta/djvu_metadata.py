"""
Created on 2026-03-02

DjVu metadata blob handling

@author: wf
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)


class CorruptMetadataError(RuntimeError):
    """
    a stored metadata wrapper has neither an xml nor an error entry
    """


@dataclass(frozen=True)
class MetadataXml:
    """
    successfully extracted XML metadata
    """

    xml: Optional[str]


@dataclass(frozen=True)
class MetadataError:
    """
    marker for a file whose metadata extraction failed
    """

    error: str


MetadataWrapper = Union[MetadataXml, MetadataError]


class DjVuMetadata:
    """
    codec for the stored DjVu metadata blob

    A blob is either legacy raw XML or a JSON wrapper
    with exactly one of the keys "xml" or "error".
    """

    XML_DECLARATION = "<?xml"
    EXTRACTION_ERROR = "Error extracting metadata"
    # canonical encoding of a wrapper without content
    EMPTY = json.dumps({})

    @classmethod
    def encode(cls, wrapper: MetadataWrapper) -> str:
        """
        serialize the given wrapper for storage
        """
        if isinstance(wrapper, MetadataError):
            record = {"error": wrapper.error}
        else:
            record = {"xml": wrapper.xml}
        blob = json.dumps(record)
        return blob

    @classmethod
    def decode(cls, blob: str) -> Optional[MetadataWrapper]:
        """
        decode a stored wrapper

        Args:
            blob: the stored metadata string

        Returns:
            the wrapper or None if the blob is not a serialized wrapper at all

        Raises:
            CorruptMetadataError: if the blob is a mapping without xml or error
                or its xml entry is not a string
        """
        try:
            record = json.loads(blob)
        except (TypeError, ValueError):
            return None
        if not isinstance(record, dict):
            return None
        if "error" in record:
            return MetadataError(error=str(record["error"]))
        if "xml" in record:
            xml = record["xml"]
            if xml is not None and not isinstance(xml, str):
                raise CorruptMetadataError(
                    f"DjVu metadata xml entry is a {type(xml).__name__}"
                )
            return MetadataXml(xml=xml)
        # should never ever reach here
        raise CorruptMetadataError("Error decoding DjVu metadata.")

    @classmethod
    def unwrap(cls, blob: Optional[str]) -> Optional[str]:
        """
        get the XML string of the given metadata blob

        Returns:
            the XML or None if the extraction had failed
        """
        if blob is None:
            return None
        if blob.startswith(cls.XML_DECLARATION):
            # old style - not serialized but a raw string of XML
            return blob
        wrapper = cls.decode(blob)
        if wrapper is None:
            # not really serialized after all
            return blob
        if isinstance(wrapper, MetadataError):
            logger.debug("DjVu metadata marked as failed: %s", wrapper.error)
            return None
        return wrapper.xml

    @classmethod
    def is_valid(cls, metadata: Optional[str]) -> bool:
        """
        check whether the given metadata is usable

        Args:
            metadata: a stored blob or an already unwrapped XML string

        Returns:
            False for empty metadata, the empty wrapper and the error marker

        Raises:
            CorruptMetadataError: for a wrapper without xml or error entry
        """
        if not metadata or metadata == cls.EMPTY:
            return False
        if metadata.startswith(cls.XML_DECLARATION):
            return True
        wrapper = cls.decode(metadata)
        valid = not isinstance(wrapper, MetadataError)
        return valid
