from typing import List, Optional

from auditor.dom.core import CheckOutcome, ElementBase, RuleDefinition, audit_spec, rule_setting
from auditor.dom.models import HTMLDocument
from auditor.dom.scoring import round_half_up
from auditor.model import Issue, RuleResult, Severity

RULE_ID = "meta-info"
SETTINGS_KEY = "meta_info"

TITLE_POINTS = 20
DESCRIPTION_POINTS = 20
SHORT_DESCRIPTION_POINTS = 10
CANONICAL_POINTS = 15
SOCIAL_POINTS = 15
LANG_POINTS = 15
VIEWPORT_POINTS = 15

SOCIAL_PREVIEW_KINDS = ("og:title", "og:description", "og:image")


def _named_meta(doc: HTMLDocument, name: str) -> Optional[ElementBase]:
    return next(
        (el for el in doc.find_all("meta") if (el.get("name") or "").strip().lower() == name),
        None
    )


def _mark(flag: bool) -> str:
    return "✓" if flag else "✗"


# --- CHECKS ---

@audit_spec(codes=["MISSING_TITLE"])
def check_title(doc: HTMLDocument) -> CheckOutcome:
    """Validates the presence of a non-empty <title> tag."""
    title = doc.text(doc.find("title"))
    issues: List[Issue] = []
    if not title:
        issues.append(Issue(severity=Severity.ERROR, message="Missing <title> tag", code="MISSING_TITLE"))
    return CheckOutcome(TITLE_POINTS if title else 0, issues, {"has_title": bool(title)})


@audit_spec(codes=["MISSING_META_DESC", "META_DESC_TOO_SHORT"])
def check_description(doc: HTMLDocument) -> CheckOutcome:
    """Validates the presence and minimal length of the meta description."""
    description = (HTMLDocument.attr(_named_meta(doc, "description"), "content") or "").strip()
    min_length = int(rule_setting(SETTINGS_KEY, "min_description_length", 10))

    issues: List[Issue] = []
    if len(description) > min_length:
        score = DESCRIPTION_POINTS
    elif description:
        score = SHORT_DESCRIPTION_POINTS
        issues.append(Issue(
            severity=Severity.WARNING,
            message=f"Meta description is too short ({len(description)} chars)",
            code="META_DESC_TOO_SHORT"
        ))
    else:
        score = 0
        issues.append(Issue(severity=Severity.WARNING, message="Missing meta description", code="MISSING_META_DESC"))

    return CheckOutcome(score, issues, {
        "has_description": bool(description),
        "description_length": len(description),
    })


@audit_spec(codes=["MISSING_CANONICAL"])
def check_canonical(doc: HTMLDocument) -> CheckOutcome:
    """Ensures a canonical URL is declared."""
    has_canonical = any(
        "canonical" in (el.get("rel") or "").lower().split() and el.has_value("href")
        for el in doc.find_all("link")
    )
    issues: List[Issue] = []
    if not has_canonical:
        issues.append(Issue(severity=Severity.INFO, message="No canonical URL specified", code="MISSING_CANONICAL"))
    return CheckOutcome(CANONICAL_POINTS if has_canonical else 0, issues, {"has_canonical": has_canonical})


@audit_spec(codes=["PARTIAL_OPEN_GRAPH", "MISSING_OPEN_GRAPH"])
def check_social_preview(doc: HTMLDocument) -> CheckOutcome:
    """
    Open Graph preview tags. Each distinct kind counts once, so duplicated
    og:image tags do not stand in for a missing og:title.
    """
    present = {
        (el.get("property") or "").strip().lower() for el in doc.find_all("meta")
    }
    og_count = sum(1 for kind in SOCIAL_PREVIEW_KINDS if kind in present)
    score = round_half_up(og_count / len(SOCIAL_PREVIEW_KINDS) * SOCIAL_POINTS)

    issues: List[Issue] = []
    if og_count == 0:
        issues.append(Issue(severity=Severity.INFO, message="No Open Graph meta tags found", code="MISSING_OPEN_GRAPH"))
    elif og_count < len(SOCIAL_PREVIEW_KINDS):
        issues.append(Issue(
            severity=Severity.INFO,
            message=f"Partial Open Graph tags: {og_count}/3 (title, description, image)",
            code="PARTIAL_OPEN_GRAPH"
        ))
    return CheckOutcome(score, issues, {"og_count": og_count})


@audit_spec(codes=["MISSING_LANG"])
def check_language(doc: HTMLDocument) -> CheckOutcome:
    has_lang = bool(doc.root is not None and doc.root.has_value("lang"))
    issues: List[Issue] = []
    if not has_lang:
        issues.append(Issue(severity=Severity.WARNING, message="Missing lang attribute on <html>", code="MISSING_LANG"))
    return CheckOutcome(LANG_POINTS if has_lang else 0, issues, {"has_lang": has_lang})


@audit_spec(codes=["MISSING_VIEWPORT"])
def check_viewport(doc: HTMLDocument) -> CheckOutcome:
    has_viewport = _named_meta(doc, "viewport") is not None
    issues: List[Issue] = []
    if not has_viewport:
        issues.append(Issue(severity=Severity.INFO, message="No viewport meta tag", code="MISSING_VIEWPORT"))
    return CheckOutcome(VIEWPORT_POINTS if has_viewport else 0, issues, {"has_viewport": has_viewport})


# --- RULE ---

def evaluate(doc: HTMLDocument) -> RuleResult:
    checks = [
        check_title(doc),
        check_description(doc),
        check_canonical(doc),
        check_social_preview(doc),
        check_language(doc),
        check_viewport(doc),
    ]
    details = {}
    issues: List[Issue] = []
    for outcome in checks:
        details.update(outcome.details)
        issues.extend(outcome.issues)

    return RuleResult(
        rule=RULE_ID,
        score=sum(outcome.score for outcome in checks),
        message=(
            f"Meta: {_mark(details['has_title'])} title, {_mark(details['has_description'])} description, "
            f"{_mark(details['has_canonical'])} canonical, {_mark(details['has_lang'])} lang"
        ),
        issues=tuple(issues),
        details=details
    )


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    rule_id=RULE_ID,
    label="Meta Information",
    evaluate=evaluate,
    checks=[check_title, check_description, check_canonical, check_social_preview, check_language, check_viewport],
    suggestions=[
        "Add a descriptive <title> and <meta name=\"description\">",
        "Add Open Graph tags for better link previews",
        "Set lang attribute on <html> element",
    ]
)
