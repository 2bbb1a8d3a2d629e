"""
Catalog parser for XML game catalogs (No-Intro, Redump, MAME, etc.)
and owned-list parsing.
"""

import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .classifier import categorize
from .errors import CatalogParseError, EmptyCatalogError
from .models import CatalogEntry, OwnedItem, OwnedList, ParsedCatalog

logger = logging.getLogger(__name__)

_REGION_RE = re.compile(
    r'\(([^)]*(?:USA|Europe|Japan|World|Asia|Korea|Brazil|Spain|France|'
    r'Germany|Italy|UK|China)[^)]*)\)',
    re.IGNORECASE,
)

_CATALOG_EXT_RE = re.compile(r'\.(dat|xml)$', re.IGNORECASE)


def platform_name_from_filename(file_name: str) -> str:
    """Fallback platform name: the file name without its .dat/.xml extension."""
    return _CATALOG_EXT_RE.sub('', os.path.basename(file_name or ''))


@dataclass
class ParseResult:
    """Either a parsed catalog or the reason the document was rejected"""
    catalog: Optional[ParsedCatalog] = None
    error: Optional[CatalogParseError] = None

    @property
    def ok(self) -> bool:
        return self.catalog is not None


class CatalogParser:
    """Parser for XML catalog documents"""

    @staticmethod
    def parse(content: str, file_name: str) -> ParsedCatalog:
        """
        Parse one catalog document.

        Raises:
            CatalogParseError: the document is not well-formed XML
            EmptyCatalogError: no game/machine element carries a name
        """
        content = CatalogParser._clean_content(content or '')
        root = CatalogParser._parse_xml(content, file_name)
        platform_name = (CatalogParser._header_name(root)
                         or platform_name_from_filename(file_name))

        entries = []
        skipped = 0
        for element in CatalogParser._iter_games(root):
            entry = CatalogParser._parse_game_element(element)
            if entry is None:
                skipped += 1
                continue
            entries.append(entry)

        if skipped:
            logger.debug("%s: skipped %d unnamed game elements", file_name, skipped)
        if not entries:
            raise EmptyCatalogError(file_name)

        return ParsedCatalog(file_name=file_name, platform_name=platform_name, entries=entries)

    @staticmethod
    def _clean_content(content: str) -> str:
        """Clean XML content of problematic characters"""
        content = content.lstrip('\ufeff')
        return re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f]', '', content)

    @staticmethod
    def _parse_xml(content: str, file_name: str) -> ET.Element:
        try:
            return ET.fromstring(content)
        except ET.ParseError as e:
            raise CatalogParseError(file_name, f"Invalid XML: {e}")

    @staticmethod
    def _header_name(root: ET.Element) -> str:
        header = root.find('header')
        if header is None:
            return ''
        name_elem = header.find('name')
        if name_elem is None or not name_elem.text:
            return ''
        return name_elem.text.strip()

    @staticmethod
    def _iter_games(root: ET.Element) -> Iterable[ET.Element]:
        """game and machine elements, in document order"""
        for element in root.iter():
            if element.tag in ('game', 'machine'):
                yield element

    @staticmethod
    def _child_text(element: ET.Element, tag: str) -> str:
        child = element.find(tag)
        if child is None or not child.text:
            return ''
        return child.text.strip()

    @staticmethod
    def _parse_game_element(game: ET.Element) -> Optional[CatalogEntry]:
        reference_name = (game.get('name') or '').strip()
        if not reference_name:
            return None

        description = CatalogParser._child_text(game, 'description') or reference_name
        comment = CatalogParser._child_text(game, 'comment')

        media_file_name = reference_name
        size, crc32, md5, sha1 = 0, '', '', ''
        rom = game.find('rom')
        if rom is not None:
            media_file_name = rom.get('name') or reference_name
            try:
                size = int(rom.get('size', 0))
            except (ValueError, TypeError):
                size = 0
            crc32 = rom.get('crc', '').lower()
            md5 = rom.get('md5', '').lower()
            sha1 = rom.get('sha1', '').lower()

        return CatalogEntry(
            reference_name=reference_name,
            description=description,
            region=CatalogParser._extract_region(description),
            category=categorize(description, reference_name, comment),
            media_file_name=media_file_name,
            parent_reference=game.get('cloneof') or None,
            size=size,
            crc32=crc32,
            md5=md5,
            sha1=sha1,
            comment=comment,
        )

    @staticmethod
    def _extract_region(description: str) -> Optional[str]:
        """Content of the first parenthetical naming a known region"""
        match = _REGION_RE.search(description)
        return match.group(1) if match else None


def parse_catalog(content: str, file_name: str) -> ParseResult:
    """Parse a catalog document without raising for malformed input."""
    try:
        return ParseResult(catalog=CatalogParser.parse(content, file_name))
    except CatalogParseError as e:
        return ParseResult(error=e)


def load_catalogs(
    documents: Iterable[Tuple[str, str]],
    existing: Iterable[ParsedCatalog] = (),
) -> Tuple[List[ParsedCatalog], List[CatalogParseError]]:
    """
    Parse several ``(file_name, content)`` documents.

    Rejected documents are returned as errors and never stop the batch.
    Documents whose file name is already loaded are ignored.
    """
    seen = {c.file_name for c in existing}
    catalogs: List[ParsedCatalog] = []
    failures: List[CatalogParseError] = []

    for file_name, content in documents:
        if file_name in seen:
            logger.info("Catalog %s already loaded, skipping", file_name)
            continue
        result = parse_catalog(content, file_name)
        if result.ok:
            seen.add(file_name)
            catalogs.append(result.catalog)
            logger.info("Loaded catalog %s: %s (%d entries)", file_name,
                        result.catalog.platform_name, len(result.catalog.entries))
        else:
            logger.warning("Skipping catalog %s: %s", file_name, result.error.reason)
            failures.append(result.error)

    return catalogs, failures


def parse_owned_list(content: str, platform_name: str, file_name: str = '') -> OwnedList:
    """One owned file name per line; blank lines are ignored."""
    items = [OwnedItem(line.strip()) for line in (content or '').splitlines() if line.strip()]
    return OwnedList(platform_name=platform_name, items=items, file_name=file_name)
