from typing import List

from auditor.dom.core import CheckOutcome, RuleDefinition, audit_spec, rule_setting
from auditor.dom.models import HTMLDocument
from auditor.dom.predicates import has_label_association, is_labelable_input
from auditor.dom.scoring import EMPTY_POPULATION_SCORE, clamp_score, ratio_score, safe_ratio, weighted_score
from auditor.model import Issue, RuleResult, Severity

RULE_ID = "semantic-html"
SETTINGS_KEY = "semantic_html"

SEMANTIC_TAGS = (
    "section", "article", "nav", "main", "header", "footer",
    "aside", "figure", "figcaption", "details", "summary",
)
GENERIC_TAGS = ("div", "span")
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

RATIO_WEIGHT = 0.5
HEADING_WEIGHT = 0.3
LABEL_WEIGHT = 0.2


# --- CHECKS ---

@audit_spec(codes=["VERY_LOW_SEMANTIC_RATIO", "LOW_SEMANTIC_RATIO", "SEMANTIC_RATIO_BELOW_TARGET"])
def check_semantic_ratio(doc: HTMLDocument) -> CheckOutcome:
    """
    Share of semantic containers among all containers.
    A ratio of 1/ratio_multiplier (33% by default) already earns full credit.
    """
    semantic_count = len(doc.find_all(*SEMANTIC_TAGS))
    generic_count = len(doc.find_all(*GENERIC_TAGS))
    total = semantic_count + generic_count
    ratio = safe_ratio(semantic_count, total)

    multiplier = float(rule_setting(SETTINGS_KEY, "ratio_multiplier", 3))
    score = clamp_score(min(ratio * multiplier, 1) * 100)

    issues: List[Issue] = []
    if total > 0:
        if ratio < float(rule_setting(SETTINGS_KEY, "error_ratio", 0.1)):
            issues.append(Issue(
                severity=Severity.ERROR,
                message=f"Very low semantic tag ratio: {semantic_count}/{total}",
                code="VERY_LOW_SEMANTIC_RATIO"
            ))
        elif ratio < float(rule_setting(SETTINGS_KEY, "warning_ratio", 0.3)):
            issues.append(Issue(
                severity=Severity.WARNING,
                message=f"Low semantic tag ratio: {semantic_count}/{total}",
                code="LOW_SEMANTIC_RATIO"
            ))
        elif score < 100:
            issues.append(Issue(
                severity=Severity.INFO,
                message=f"Semantic tag ratio slightly below target: {semantic_count}/{total}",
                code="SEMANTIC_RATIO_BELOW_TARGET"
            ))

    return CheckOutcome(score, issues, {
        "semantic_count": semantic_count,
        "generic_count": generic_count,
    })


@audit_spec(codes=["NO_HEADINGS", "MISSING_H1", "MULTIPLE_H1", "SKIPPED_HEADING_LEVEL"])
def check_heading_hierarchy(doc: HTMLDocument) -> CheckOutcome:
    """
    Exactly one <h1> and no skipped levels, judged on the observed heading
    sequence in document order.
    """
    levels = [int(el.tag[1]) for el in doc.find_all(*HEADING_TAGS)]
    issues: List[Issue] = []

    if not levels:
        issues.append(Issue(severity=Severity.INFO, message="No headings found", code="NO_HEADINGS"))
        return CheckOutcome(EMPTY_POPULATION_SCORE, issues, {"headings": 0, "h1_count": 0})

    score = 100
    h1_count = levels.count(1)
    if h1_count == 0:
        issues.append(Issue(severity=Severity.ERROR, message="No <h1> found", code="MISSING_H1"))
        score -= int(rule_setting(SETTINGS_KEY, "missing_h1_penalty", 30))
    elif h1_count > 1:
        issues.append(Issue(
            severity=Severity.WARNING,
            message=f"Multiple <h1> tags found: {h1_count}",
            code="MULTIPLE_H1"
        ))
        score -= int(rule_setting(SETTINGS_KEY, "multiple_h1_penalty", 15))

    skip_penalty = int(rule_setting(SETTINGS_KEY, "skipped_level_penalty", 10))
    for previous, current in zip(levels, levels[1:]):
        if current > previous + 1:
            issues.append(Issue(
                severity=Severity.WARNING,
                message=f"Heading level skipped: h{previous} → h{current}",
                code="SKIPPED_HEADING_LEVEL"
            ))
            score -= skip_penalty

    return CheckOutcome(max(0, score), issues, {"headings": len(levels), "h1_count": h1_count})


@audit_spec(codes=["UNLABELLED_INPUTS"])
def check_label_association(doc: HTMLDocument) -> CheckOutcome:
    """Form controls associated with a label."""
    inputs = doc.select(is_labelable_input)
    label_targets = doc.label_targets()
    in_label = doc.inside("label")
    labeled_count = sum(
        1 for el in inputs
        if has_label_association(el, label_targets, el.index in in_label)
    )
    input_count = len(inputs)

    issues: List[Issue] = []
    if labeled_count < input_count:
        issues.append(Issue(
            severity=Severity.WARNING,
            message=f"{input_count - labeled_count}/{input_count} form inputs missing labels",
            code="UNLABELLED_INPUTS"
        ))

    return CheckOutcome(ratio_score(labeled_count, input_count), issues, {
        "labeled_count": labeled_count,
        "input_count": input_count,
    })


# --- RULE ---

def evaluate(doc: HTMLDocument) -> RuleResult:
    ratio = check_semantic_ratio(doc)
    headings = check_heading_hierarchy(doc)
    labels = check_label_association(doc)

    score = weighted_score(
        (ratio.score, RATIO_WEIGHT),
        (headings.score, HEADING_WEIGHT),
        (labels.score, LABEL_WEIGHT),
    )
    details = {
        **ratio.details, **headings.details, **labels.details,
        "ratio_score": ratio.score,
        "heading_score": headings.score,
        "label_score": labels.score,
    }
    return RuleResult(
        rule=RULE_ID,
        score=score,
        message=(
            f"Semantic: {details['semantic_count']} tags, {details['headings']} headings, "
            f"{details['labeled_count']}/{details['input_count']} labeled inputs"
        ),
        issues=tuple(ratio.issues + headings.issues + labels.issues),
        details=details
    )


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    rule_id=RULE_ID,
    label="Semantic HTML",
    evaluate=evaluate,
    checks=[check_semantic_ratio, check_heading_hierarchy, check_label_association],
    suggestions=[
        "Replace generic <div> containers with <section>, <article>, <nav>, <main>",
        "Ensure a proper heading hierarchy (h1 → h2 → h3)",
        "Associate all form inputs with <label> elements",
    ]
)
