"""
Created on 2026-03-05

retrieve the XML metadata of a DjVu file with the DjVuLibre tools

@author: wf
"""

import html
import logging
import re
import shlex
import subprocess
from typing import List, Optional

from djvumeta.djvu_config import DjVuMetaConfig

logger = logging.getLogger(__name__)


class DjVuMetadataRetriever:
    """
    run djvutoxml and djvutxt on a DjVu file and combine their output
    """

    # (page x y w h "text") or () for an empty page
    PAGE_PATTERN = re.compile(
        r'\(page\s[\d-]*\s[\d-]*\s[\d-]*\s[\d-]*\s*"((?:\\.|[^"\\]+)*?)"\s*\)'
        r"|\(\s*()\)",
        re.DOTALL,
    )
    ESCAPE_PATTERN = re.compile(rb"\\([0-7]{1,3}|x[0-9A-Fa-f]{1,2}|.)", re.DOTALL)
    OCTAL_PATTERN = re.compile(rb"[0-7]{1,3}")
    SIMPLE_ESCAPES = {
        b"n": b"\n",
        b"t": b"\t",
        b"r": b"\r",
        b"a": b"\a",
        b"b": b"\b",
        b"f": b"\f",
        b"v": b"\v",
    }
    # group and unit separators djvutxt emits between zones
    SEPARATOR_PATTERN = re.compile(r"[\013\035\037]")
    CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffd]")

    def __init__(self, config: DjVuMetaConfig = None):
        if config is None:
            config = DjVuMetaConfig.get_instance()
        self.config = config

    def run_tool(self, tool: str, args: List[str], path: str) -> Optional[str]:
        """
        run the given command line tool on the given path

        Returns:
            the decoded standard output or None if the tool failed
        """
        cmd = shlex.split(tool) + args + [path]
        logger.debug("running %s", shlex.join(cmd))
        try:
            proc = subprocess.run(
                cmd, capture_output=True, timeout=self.config.shell_timeout
            )
        except (OSError, subprocess.SubprocessError) as ex:
            logger.warning("%s failed for %s: %s", tool, path, ex)
            return None
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            logger.warning(
                "%s failed for %s with exit code %d: %s",
                tool,
                path,
                proc.returncode,
                stderr,
            )
            return None
        output = proc.stdout.decode("utf-8", errors="replace")
        return output

    @classmethod
    def unescape(cls, text: str) -> str:
        """
        resolve the C style escapes of djvutxt output
        """

        def replace(match: re.Match) -> bytes:
            seq = match.group(1)
            if cls.OCTAL_PATTERN.fullmatch(seq):
                return bytes([int(seq, 8) & 0xFF])
            if seq[:1] == b"x" and len(seq) > 1:
                return bytes([int(seq[1:], 16)])
            return cls.SIMPLE_ESCAPES.get(seq, seq)

        raw = cls.ESCAPE_PATTERN.sub(replace, text.encode("utf-8"))
        unescaped = raw.decode("utf-8", errors="replace")
        return unescaped

    @classmethod
    def page_element(cls, text: str) -> str:
        """
        get the PAGE element for the given escaped page text
        """
        value = cls.CONTROL_PATTERN.sub("", cls.unescape(text))
        value = html.escape(value, quote=True).replace("\n", "&#10;")
        element = f'<PAGE value="{value}" />'
        return element

    @classmethod
    def convert_text_to_xml(cls, txt: str) -> str:
        """
        convert the output of djvutxt --detail=page to a DjVuTxt tree
        """
        txt = cls.SEPARATOR_PATTERN.sub("", txt)
        body = cls.PAGE_PATTERN.sub(
            lambda match: cls.page_element(match.group(1) or ""), txt
        )
        xml = f"<DjVuTxt>\n<HEAD></HEAD>\n<BODY>\n{body}</BODY>\n</DjVuTxt>\n"
        return xml

    @classmethod
    def combine(cls, meta_xml: str, text_xml: Optional[str]) -> str:
        """
        combine the DjVuXML geometry and the DjVuTxt text in a mw-djvu wrapper
        """
        if text_xml is None:
            return meta_xml
        xml = meta_xml.replace("<DjVuXML>", "<mw-djvu><DjVuXML>", 1)
        xml = f"{xml}{text_xml}</mw-djvu>"
        return xml

    def retrieve_metadata(self, path: str) -> Optional[str]:
        """
        retrieve the XML metadata of the DjVu file at the given path

        Returns:
            the XML or None if the metadata could not be extracted
        """
        if not self.config.djvu_to_xml:
            logger.warning("no djvutoxml configured - can not retrieve metadata")
            return None
        meta_xml = self.run_tool(self.config.djvu_to_xml, [], path)
        if meta_xml is None:
            return None
        meta_xml = meta_xml.strip()
        text_xml = None
        if self.config.djvu_txt:
            txt = self.run_tool(self.config.djvu_txt, ["--detail=page"], path)
            if txt is not None:
                text_xml = self.convert_text_to_xml(txt)
        xml = self.combine(meta_xml, text_xml)
        return xml
