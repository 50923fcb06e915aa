# tests/rules/test_meta_info.py
from auditor.model import Severity
from auditor.rules import meta_info
from auditor.rules.meta_info import check_canonical, check_description, check_social_preview


def test_full_page_scores_100(full_page):
    result = meta_info.evaluate(full_page)
    assert result.rule == "meta-info"
    assert result.score == 100
    assert result.issues == ()
    assert result.details["og_count"] == 3
    assert result.message == "Meta: ✓ title, ✓ description, ✓ canonical, ✓ lang"


def test_empty_document(parse):
    result = meta_info.evaluate(parse("<html><body></body></html>"))
    assert result.score == 0
    assert [(i.code, i.severity) for i in result.issues] == [
        ("MISSING_TITLE", Severity.ERROR),
        ("MISSING_META_DESC", Severity.WARNING),
        ("MISSING_CANONICAL", Severity.INFO),
        ("MISSING_OPEN_GRAPH", Severity.INFO),
        ("MISSING_LANG", Severity.WARNING),
        ("MISSING_VIEWPORT", Severity.INFO),
    ]
    assert result.message == "Meta: ✗ title, ✗ description, ✗ canonical, ✗ lang"


def test_blank_title_is_missing(parse):
    result = meta_info.evaluate(parse('<html lang="en"><head><title>   </title></head></html>'))
    assert result.details["has_title"] is False
    assert result.issues[0].code == "MISSING_TITLE"


def test_short_description_earns_half_credit(parse):
    outcome = check_description(parse('<meta name="description" content="Widgets">'))
    assert outcome.score == 10
    assert outcome.issues[0].code == "META_DESC_TOO_SHORT"
    assert outcome.issues[0].severity == Severity.WARNING


def test_description_must_exceed_ten_characters(parse):
    assert check_description(parse('<meta name="description" content="abcdefghij">')).score == 10
    assert check_description(parse('<meta name="description" content="abcdefghijk">')).score == 20


def test_canonical_needs_href(parse):
    assert check_canonical(parse('<link rel="Canonical" href="https://x.example/">')).score == 15
    assert check_canonical(parse('<link rel="canonical">')).score == 0
    assert check_canonical(parse('<link rel="alternate canonical" href="/">')).score == 15


def test_partial_social_preview(parse):
    doc = parse('<meta property="og:title" content="t"><meta property="og:image" content="i">')
    outcome = check_social_preview(doc)
    assert outcome.score == 10
    assert outcome.issues[0].code == "PARTIAL_OPEN_GRAPH"
    assert "2/3" in outcome.issues[0].message


def test_duplicate_social_tags_count_once(parse):
    doc = parse('<meta property="og:image" content="a"><meta property="og:image" content="b">')
    outcome = check_social_preview(doc)
    assert outcome.details["og_count"] == 1
    assert outcome.score == 5
