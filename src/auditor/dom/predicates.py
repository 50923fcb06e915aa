# src/auditor/dom/predicates.py
"""
Named predicates over parsed elements and raw strings.

Every pattern a rule matches against lives here, so each one can be
exercised in isolation with literal fixtures.
"""
import json
import re
from typing import Any, Iterable, Optional, Set

from .core import ElementBase

# Generated class names, e.g. 'css-1q2w3e4' or 'Button_primary__x7Yz9'.
HASH_CLASS_RE = re.compile(r'^[a-zA-Z_][\w-]*[_-][a-zA-Z0-9]{5,}$', re.ASCII)
MODEL_CONTEXT_SCRIPT_RE = re.compile(r'modelContext|model-context|webmcp', re.IGNORECASE)
MCP_DISCOVERY_RE = re.compile(r'mcp|model.?context', re.IGNORECASE)
MCP_HTTP_EQUIV_RE = re.compile(r'mcp', re.IGNORECASE)
SCHEMA_ORG_RE = re.compile(r'schema\.org', re.IGNORECASE)
RESTRICTIVE_ROBOTS_RE = re.compile(r'\b(noindex|nofollow|none)\b', re.IGNORECASE)

JSON_LD_TYPE = "application/ld+json"
NAMING_ATTRS = ("aria-label", "aria-labelledby", "title")
LABEL_ATTRS = ("aria-label", "aria-labelledby")
UNLABELLED_INPUT_TYPES = ("hidden", "submit", "button")
BUTTON_INPUT_TYPES = ("submit", "button", "reset")


# --- Class names ---

def is_hash_like_class(name: str) -> bool:
    """True for a single class name that looks machine generated."""
    return bool(HASH_CLASS_RE.match(name))


def has_hash_like_class(class_attr: Optional[str]) -> bool:
    """True when any class in a space separated class attribute looks generated."""
    return any(is_hash_like_class(c) for c in (class_attr or "").split())


# --- Agent protocol signals ---

def references_model_context(script_source: str) -> bool:
    """Script content mentions navigator.modelContext or WebMCP."""
    return bool(MODEL_CONTEXT_SCRIPT_RE.search(script_source or ""))


def is_mcp_discovery_meta(el: ElementBase) -> bool:
    """<meta name="mcp-server">, <meta name="model-context">, or an MCP http-equiv."""
    if el.tag != "meta":
        return False
    name = el.get("name") or ""
    http_equiv = el.get("http-equiv") or ""
    return bool(MCP_DISCOVERY_RE.search(name) or MCP_HTTP_EQUIV_RE.search(http_equiv))


def is_mcp_discovery_link(el: ElementBase) -> bool:
    """<link rel="mcp"> and similar endpoint declarations."""
    if el.tag != "link":
        return False
    return bool(MCP_DISCOVERY_RE.search(el.get("rel") or ""))


# --- Structured data ---

def is_json_ld_script(el: ElementBase) -> bool:
    return el.tag == "script" and (el.get("type") or "").strip().lower() == JSON_LD_TYPE


def parse_json_ld(source: str) -> Optional[Any]:
    """Decoded JSON-LD payload, or None when the block is blank or not valid JSON."""
    if not source or not source.strip():
        return None
    try:
        return json.loads(source)
    except (json.JSONDecodeError, ValueError):
        return None


def references_schema_org(source: str) -> bool:
    return bool(SCHEMA_ORG_RE.search(source or ""))


def is_microdata_scope(el: ElementBase) -> bool:
    return el.has("itemscope")


# --- Crawler directives ---

def is_restrictive_robots(content: Optional[str]) -> bool:
    """robots meta content that blocks indexing or link following."""
    return bool(RESTRICTIVE_ROBOTS_RE.search(content or ""))


# --- Test identifiers ---

def has_test_id(el: ElementBase, attributes: Iterable[str]) -> bool:
    """True when any recognized test-identifier attribute carries a value."""
    return any(el.has_value(attr) for attr in attributes)


# --- Labels and accessible names ---

def is_labelable_input(el: ElementBase) -> bool:
    """Form controls that need an associated label."""
    if el.tag in ("select", "textarea"):
        return True
    if el.tag == "input":
        return (el.get("type") or "text").strip().lower() not in UNLABELLED_INPUT_TYPES
    return False


def is_hidden_input(el: ElementBase) -> bool:
    return el.tag == "input" and (el.get("type") or "").strip().lower() == "hidden"


def has_label_association(el: ElementBase, label_targets: Set[str], inside_label: bool) -> bool:
    """
    Labelled through aria attributes, a wrapping <label>, or <label for="id">.
    `label_targets` holds every id referenced by a label's `for` attribute.
    """
    if any(el.has_value(attr) for attr in LABEL_ATTRS):
        return True
    if inside_label:
        return True
    element_id = (el.get("id") or "").strip()
    return bool(element_id) and element_id in label_targets


def has_accessible_name(el: ElementBase, label_targets: Set[str], inside_label: bool,
                        has_text: Optional[bool] = None) -> bool:
    """
    An interactive element exposes a name through a naming attribute,
    non-empty text, an associated label, a button-like input's value or an
    image input's alt text.

    `has_text` is whether the element's subtree carries text (see
    HTMLDocument.has_text); when omitted only the element's own text counts.
    """
    if any(el.has_value(attr) for attr in NAMING_ATTRS):
        return True
    if (bool(el.text.strip()) if has_text is None else has_text):
        return True
    if el.tag == "input":
        input_type = (el.get("type") or "text").strip().lower()
        if input_type in BUTTON_INPUT_TYPES and el.has_value("value"):
            return True
        if input_type == "image" and el.has_value("alt"):
            return True
    if el.tag in ("input", "select", "textarea"):
        return has_label_association(el, label_targets, inside_label)
    return False
