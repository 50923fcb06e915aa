from typing import List

from auditor.dom.core import CheckOutcome, RuleDefinition, audit_spec, rule_setting
from auditor.dom.models import HTMLDocument
from auditor.dom.predicates import has_accessible_name, is_hidden_input
from auditor.dom.scoring import ratio_score, round_half_up, weighted_score
from auditor.model import Issue, RuleResult, Severity

RULE_ID = "aria-coverage"
SETTINGS_KEY = "aria_coverage"

INTERACTIVE_TAGS = ("button", "a", "input", "select", "textarea")

INTERACTIVE_WEIGHT = 0.6
IMAGE_WEIGHT = 0.4


# --- CHECKS ---

@audit_spec(codes=["UNNAMED_INTERACTIVE"])
def check_interactive_names(doc: HTMLDocument) -> CheckOutcome:
    """Interactive elements exposing an accessible name. Hidden inputs are not interactive."""
    interactive = [el for el in doc.find_all(*INTERACTIVE_TAGS) if not is_hidden_input(el)]
    label_targets = doc.label_targets()
    in_label = doc.inside("label")
    named_count = sum(
        1 for el in interactive
        if has_accessible_name(el, label_targets, el.index in in_label, has_text=doc.has_text(el))
    )
    interactive_count = len(interactive)

    issues: List[Issue] = []
    if named_count < interactive_count:
        issues.append(Issue(
            severity=Severity.WARNING,
            message=f"{interactive_count - named_count}/{interactive_count} interactive elements lack accessible names",
            code="UNNAMED_INTERACTIVE"
        ))

    return CheckOutcome(ratio_score(named_count, interactive_count), issues, {
        "interactive_count": interactive_count,
        "aria_labeled_count": named_count,
    })


@audit_spec(codes=["MISSING_ALT"])
def check_image_alt(doc: HTMLDocument) -> CheckOutcome:
    """
    Images carrying an alt attribute. Presence is what counts: alt="" is a
    legitimate marker for decorative images.
    """
    images = doc.find_all("img")
    alt_count = sum(1 for el in images if el.get("alt") is not None)
    img_count = len(images)

    issues: List[Issue] = []
    if alt_count < img_count:
        issues.append(Issue(
            severity=Severity.ERROR,
            message=f"{img_count - alt_count}/{img_count} images missing alt attribute",
            code="MISSING_ALT"
        ))

    return CheckOutcome(ratio_score(alt_count, img_count), issues, {
        "img_count": img_count,
        "alt_count": alt_count,
    })


def role_bonus(with_role: int) -> int:
    """Small capped bonus for explicit role attributes, in final-score points."""
    per_element = float(rule_setting(SETTINGS_KEY, "role_bonus_per_element", 2))
    cap = float(rule_setting(SETTINGS_KEY, "role_bonus_cap", 20))
    scale = float(rule_setting(SETTINGS_KEY, "role_bonus_scale", 0.1))
    return round_half_up(min(with_role * per_element, cap) * scale)


# --- RULE ---

def evaluate(doc: HTMLDocument) -> RuleResult:
    interactive = check_interactive_names(doc)
    images = check_image_alt(doc)
    with_role = len(doc.with_attr("role"))
    bonus = role_bonus(with_role)

    base_score = weighted_score((interactive.score, INTERACTIVE_WEIGHT), (images.score, IMAGE_WEIGHT))
    score = min(100, base_score + bonus)

    details = {
        **interactive.details, **images.details,
        "with_role": with_role,
        "interactive_score": interactive.score,
        "image_alt_score": images.score,
        "role_bonus": bonus,
    }
    return RuleResult(
        rule=RULE_ID,
        score=score,
        message=(
            f"ARIA: {details['aria_labeled_count']}/{details['interactive_count']} interactive labeled, "
            f"{details['alt_count']}/{details['img_count']} imgs with alt, {with_role} role attrs"
        ),
        issues=tuple(interactive.issues + images.issues),
        details=details
    )


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    rule_id=RULE_ID,
    label="ARIA Coverage",
    evaluate=evaluate,
    checks=[check_interactive_names, check_image_alt],
    suggestions=[
        "Add aria-label to icon-only buttons and links",
        "Ensure all <img> tags have descriptive alt attributes",
        "Use role attributes for custom interactive components",
    ]
)
