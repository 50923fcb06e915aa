# src/auditor/dom/models.py
import re
from typing import Callable, Iterable, Iterator, Optional, Pattern, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .core import RAW_CONTENT_TAGS, ElementBase

Elements = Tuple[ElementBase, ...]


class HTMLDocument(BaseModel):
    """
    Represents one parsed markup payload.

    The document is built once by the DOMBuilder and never mutated afterwards.
    Every query returns a snapshot tuple in document order, so rules can share
    one instance without coordination.
    """
    model_config = ConfigDict(frozen=True)

    raw_url: str
    elements: Elements = ()

    # --- Tag-name queries ---

    def find_all(self, *tags: str) -> Elements:
        """All elements whose tag name is one of `tags`."""
        wanted = {t.lower() for t in tags}
        return tuple(el for el in self.elements if el.tag in wanted)

    def find(self, *tags: str) -> Optional[ElementBase]:
        """First element whose tag name is one of `tags`."""
        found = self.find_all(*tags)
        return found[0] if found else None

    def select(self, predicate: Callable[[ElementBase], bool], scope: Optional[Iterable[ElementBase]] = None) -> Elements:
        """All elements (of `scope`, default the whole document) matching `predicate`."""
        source = self.elements if scope is None else scope
        return tuple(el for el in source if predicate(el))

    # --- Attribute queries ---

    def with_attr(
            self,
            name: str,
            value: Optional[str] = None,
            pattern: Union[str, Pattern, None] = None,
            tags: Tuple[str, ...] = ()
    ) -> Elements:
        """
        Elements carrying attribute `name`, optionally restricted to an exact
        `value`, a regex `pattern` (searched, case-insensitive when given as a string)
        and/or a set of tag names.
        """
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.IGNORECASE)
        wanted_tags = {t.lower() for t in tags}

        def matches(el: ElementBase) -> bool:
            if wanted_tags and el.tag not in wanted_tags:
                return False
            attr = el.get(name)
            if attr is None:
                return False
            if value is not None and attr != value:
                return False
            if pattern is not None and not pattern.search(attr):
                return False
            return True

        return self.select(matches)

    @staticmethod
    def attr(el: Optional[ElementBase], name: str) -> Optional[str]:
        """Attribute value of `el`, or None when the element or the attribute is absent."""
        return el.get(name) if el is not None else None

    # --- Text ---

    def text(self, el: Optional[ElementBase]) -> str:
        """
        Text content of `el` and its subtree ('' for a missing element).

        Elements only store their own text, so the subtree is joined on demand:
        the element's text first, then its descendants' in document order.
        Script, style and template bodies are not text content.
        """
        if el is None:
            return ""
        parts = [el.text] if el.text else []
        parts.extend(d.text for d in self._subtree(el) if d.text and d.tag not in RAW_CONTENT_TAGS)
        return " ".join(parts)

    def has_text(self, el: ElementBase) -> bool:
        """Whether `el` or any element under it carries text. Stops at the first hit."""
        if el.text:
            return True
        return any(d.text and d.tag not in RAW_CONTENT_TAGS for d in self._subtree(el))

    # --- Tree traversal ---

    def _subtree(self, el: ElementBase) -> Iterator[ElementBase]:
        # Elements are stored in pre-order, so the subtree is the contiguous
        # run after `el` that stays deeper than it.
        for i in range(el.index + 1, len(self.elements)):
            candidate = self.elements[i]
            if candidate.depth <= el.depth:
                return
            yield candidate

    def descendants(self, el: ElementBase) -> Elements:
        """Descendants of `el` in document order."""
        return tuple(self._subtree(el))

    def inside(self, *tags: str) -> Set[int]:
        """
        Indices of every element that is, or sits under, an element whose tag
        is one of `tags`. One pass: a parent always precedes its children.
        """
        wanted = {t.lower() for t in tags}
        covered: Set[int] = set()
        for el in self.elements:
            if el.tag in wanted or (el.parent is not None and el.parent in covered):
                covered.add(el.index)
        return covered

    def within(self, scope_tag: str = "body", exclude: Iterable[str] = ()) -> Elements:
        """
        Elements under the first `scope_tag` element, skipping tags in `exclude`.

        Fragments without a `scope_tag` (html.parser does not synthesize one)
        fall back to every element outside <head>, minus the document skeleton.
        """
        excluded = {t.lower() for t in exclude}
        scope = self.find(scope_tag)
        if scope is not None:
            candidates = self.descendants(scope)
        else:
            in_head = self.inside("head")
            candidates = tuple(
                el for el in self.elements
                if el.tag not in ("html", "head", "body") and el.index not in in_head
            )
        return tuple(el for el in candidates if el.tag not in excluded)

    def label_targets(self) -> Set[str]:
        """Every id referenced by a <label for="..."> in the document."""
        return {
            el.get("for").strip() for el in self.find_all("label") if el.has_value("for")
        }

    # --- Convenience accessors ---

    @property
    def root(self) -> Optional[ElementBase]:
        return self.find("html")
