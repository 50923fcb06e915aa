from typing import List, Tuple

from auditor.dom.core import CheckOutcome, RuleDefinition, audit_spec, rule_setting
from auditor.dom.models import HTMLDocument
from auditor.dom.predicates import has_hash_like_class, has_test_id
from auditor.dom.scoring import clamp_score, percent, safe_ratio, weighted_score
from auditor.model import Issue, RuleResult, Severity

RULE_ID = "selector-stability"
SETTINGS_KEY = "selector_stability"

DEFAULT_TEST_ID_ATTRIBUTES = ("data-testid", "data-cy", "data-qa", "data-test", "data-test-id")
NON_CONTENT_TAGS = ("script", "style", "link", "meta", "noscript", "br", "hr")
KEY_INTERACTIVE_TAGS = ("button", "a", "input", "select", "textarea")
KEY_INTERACTIVE_ROLES = ("button", "link")

TEST_ID_WEIGHT = 0.5
STABILITY_WEIGHT = 0.5


def recognized_test_id_attributes() -> Tuple[str, ...]:
    return tuple(rule_setting(SETTINGS_KEY, "test_id_attributes", DEFAULT_TEST_ID_ATTRIBUTES))


def is_key_interactive(el) -> bool:
    return el.tag in KEY_INTERACTIVE_TAGS or (el.get("role") or "").strip().lower() in KEY_INTERACTIVE_ROLES


# --- CHECKS ---

@audit_spec(codes=["LOW_TEST_ID_COVERAGE", "PARTIAL_TEST_ID_COVERAGE"])
def check_test_id_coverage(doc: HTMLDocument) -> CheckOutcome:
    """
    Key interactive elements carrying a stable test identifier.
    Full coverage of every element is not expected, only of the ones agents act on.
    """
    attributes = recognized_test_id_attributes()
    content = doc.within("body", exclude=NON_CONTENT_TAGS)
    test_id_count = sum(1 for el in content if has_test_id(el, attributes))

    interactive = doc.select(is_key_interactive)
    with_test_id = sum(1 for el in interactive if has_test_id(el, attributes))
    ratio = safe_ratio(with_test_id, len(interactive))

    issues: List[Issue] = []
    if interactive:
        if ratio < float(rule_setting(SETTINGS_KEY, "test_id_warning_ratio", 0.1)):
            issues.append(Issue(
                severity=Severity.WARNING,
                message=f"Only {with_test_id}/{len(interactive)} interactive elements have test IDs",
                code="LOW_TEST_ID_COVERAGE"
            ))
        elif ratio < 1:
            issues.append(Issue(
                severity=Severity.INFO,
                message=f"{with_test_id}/{len(interactive)} interactive elements have test IDs",
                code="PARTIAL_TEST_ID_COVERAGE"
            ))

    return CheckOutcome(clamp_score(ratio * 100), issues, {
        "test_id_count": test_id_count,
        "interactive_with_test_id": with_test_id,
        "interactive_total": len(interactive),
    })


@audit_spec(codes=["HASH_CLASSES_DOMINANT", "HASH_CLASSES_PRESENT"])
def check_class_stability(doc: HTMLDocument) -> CheckOutcome:
    """Share of styled elements whose classes look generated by a CSS-in-JS toolchain."""
    classed = [
        el for el in doc.within("body", exclude=NON_CONTENT_TAGS)
        if el.has_value("class")
    ]
    hash_count = sum(1 for el in classed if has_hash_like_class(el.get("class")))
    hash_ratio = safe_ratio(hash_count, len(classed), empty=0.0)

    issues: List[Issue] = []
    if hash_ratio > float(rule_setting(SETTINGS_KEY, "hash_warning_ratio", 0.5)):
        issues.append(Issue(
            severity=Severity.WARNING,
            message=f"{percent(hash_ratio)}% of classed elements have hash-like classes (CSS-in-JS)",
            code="HASH_CLASSES_DOMINANT"
        ))
    elif hash_ratio > 0:
        issues.append(Issue(
            severity=Severity.INFO,
            message=f"{percent(hash_ratio)}% of classed elements have hash-like classes",
            code="HASH_CLASSES_PRESENT"
        ))

    return CheckOutcome(clamp_score((1 - hash_ratio) * 100), issues, {
        "hash_class_elements": hash_count,
        "total_classed_elements": len(classed),
        "hash_ratio": percent(hash_ratio),
    })


# --- RULE ---

def evaluate(doc: HTMLDocument) -> RuleResult:
    coverage = check_test_id_coverage(doc)
    stability = check_class_stability(doc)

    score = weighted_score((coverage.score, TEST_ID_WEIGHT), (stability.score, STABILITY_WEIGHT))
    details = {
        **coverage.details, **stability.details,
        "test_id_score": coverage.score,
        "stability_score": stability.score,
    }

    if not doc.within("body", exclude=NON_CONTENT_TAGS):
        message = "No elements found to analyze"
    else:
        message = (
            f"Selectors: {details['test_id_count']} test IDs "
            f"({details['interactive_with_test_id']}/{details['interactive_total']} interactive), "
            f"{details['hash_ratio']}% hash classes"
        )

    return RuleResult(
        rule=RULE_ID,
        score=score,
        message=message,
        issues=tuple(coverage.issues + stability.issues),
        details=details
    )


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    rule_id=RULE_ID,
    label="Selector Stability",
    evaluate=evaluate,
    checks=[check_test_id_coverage, check_class_stability],
    suggestions=[
        "Add data-testid attributes to key interactive elements",
        "Prefer semantic class names over CSS-in-JS generated hashes",
        "Use stable IDs for elements that agents need to target",
    ]
)
