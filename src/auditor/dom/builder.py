# src/auditor/dom/builder.py
import logging
from typing import Dict, List

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import PreformattedString

from .core import RAW_CONTENT_TAGS, ElementBase
from .models import HTMLDocument

logger = logging.getLogger(__name__)


class DOMBuilder:
    """
    Builder responsible for parsing raw HTML into an immutable HTMLDocument.

    Parsing is tolerant: unmatched or missing closing tags and non-standard
    attributes degrade gracefully, and markup the parser rejects outright
    yields an empty document instead of an exception.
    """

    def parse_doc(self, url: str, html: str) -> HTMLDocument:
        """
        Parses raw HTML content into an HTMLDocument.

        Args:
            url (str): The URL the markup was retrieved from.
            html (str): The raw HTML string.

        Returns:
            HTMLDocument: A flat, document-ordered snapshot of every element.
        """
        if not html:
            return HTMLDocument(raw_url=url)

        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = html.replace('\ufeff', '').strip()
        try:
            soup = BeautifulSoup(clean_html, 'html.parser')
        except ParserRejectedMarkup as e:
            logger.warning("Markup for %s rejected by parser, auditing as empty: %s", url, e)
            return HTMLDocument(raw_url=url)

        elements = self._flatten(soup)
        logger.debug("Parsed %d elements from %s", len(elements), url)
        return HTMLDocument(raw_url=url, elements=tuple(elements))

    def _flatten(self, soup: BeautifulSoup) -> List[ElementBase]:
        """
        Walks the soup in document order and snapshots every tag.
        Iterative, so pathologically deep (unclosed) markup cannot exhaust the stack.
        Each element keeps only its own text, which keeps the snapshot linear
        in the size of the markup however deep it nests.
        """
        elements: List[ElementBase] = []
        positions: Dict[int, int] = {}

        for tag in soup.find_all(True):
            parent_pos = positions.get(id(tag.parent)) if isinstance(tag.parent, Tag) else None
            depth = elements[parent_pos].depth + 1 if parent_pos is not None else 0

            element = ElementBase(
                index=len(elements),
                tag=tag.name.lower(),
                attrs=self._normalize_attrs(tag),
                text=self._own_text(tag),
                source=tag.decode_contents() if tag.name in RAW_CONTENT_TAGS else "",
                parent=parent_pos,
                depth=depth
            )
            positions[id(tag)] = element.index
            elements.append(element)

        return elements

    @staticmethod
    def _own_text(tag: Tag) -> str:
        """Direct text children of `tag`, stripped and space-joined. Comments and doctypes are skipped."""
        parts = []
        for child in tag.children:
            if isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                stripped = child.strip()
                if stripped:
                    parts.append(stripped)
        return " ".join(parts)

    @staticmethod
    def _normalize_attrs(tag: Tag) -> Dict[str, str]:
        """Lower-cases attribute names and joins multi-valued attributes (class, rel)."""
        attrs: Dict[str, str] = {}
        for name, value in tag.attrs.items():
            if isinstance(value, (list, tuple)):
                value = " ".join(str(v) for v in value)
            attrs[str(name).lower()] = "" if value is None else str(value)
        return attrs
