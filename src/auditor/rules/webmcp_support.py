from typing import List

from auditor.dom.core import CheckOutcome, RuleDefinition, audit_spec
from auditor.dom.models import HTMLDocument
from auditor.dom.predicates import (
    is_json_ld_script,
    is_mcp_discovery_link,
    is_mcp_discovery_meta,
    is_microdata_scope,
    is_restrictive_robots,
    parse_json_ld,
    references_model_context,
    references_schema_org,
)
from auditor.model import Issue, RuleResult, Severity

RULE_ID = "webmcp-support"

# Point allocation of the four independent checks (sums to 100).
MODEL_CONTEXT_POINTS = 25
DISCOVERY_POINTS = 25
STRUCTURED_DATA_POINTS = 30
PARTIAL_STRUCTURED_DATA_POINTS = 20
ROBOTS_PERMISSIVE_POINTS = 20
ROBOTS_ABSENT_POINTS = 15
ROBOTS_RESTRICTIVE_POINTS = 5


# --- CHECKS ---

@audit_spec(codes=["NO_MODEL_CONTEXT"])
def check_model_context_script(doc: HTMLDocument) -> CheckOutcome:
    """Inline scripts registering tools through navigator.modelContext / WebMCP."""
    has_model_context = any(references_model_context(el.source) for el in doc.find_all("script"))
    issues: List[Issue] = []
    if not has_model_context:
        issues.append(Issue(
            severity=Severity.INFO,
            message="No WebMCP / navigator.modelContext scripts detected",
            code="NO_MODEL_CONTEXT"
        ))
    return CheckOutcome(MODEL_CONTEXT_POINTS if has_model_context else 0, issues, {
        "has_model_context": has_model_context,
    })


@audit_spec(codes=["NO_MCP_DISCOVERY"])
def check_discovery_declaration(doc: HTMLDocument) -> CheckOutcome:
    """<meta name="mcp-server"> or <link rel="mcp"> style endpoint discovery."""
    has_mcp_meta = bool(doc.select(is_mcp_discovery_meta) or doc.select(is_mcp_discovery_link))
    issues: List[Issue] = []
    if not has_mcp_meta:
        issues.append(Issue(
            severity=Severity.INFO,
            message='No <meta name="mcp-server"> or MCP link declarations found',
            code="NO_MCP_DISCOVERY"
        ))
    return CheckOutcome(DISCOVERY_POINTS if has_mcp_meta else 0, issues, {
        "has_mcp_meta": has_mcp_meta,
    })


@audit_spec(codes=["NO_STRUCTURED_DATA", "PARTIAL_STRUCTURED_DATA", "INVALID_JSON_LD"])
def check_structured_data(doc: HTMLDocument) -> CheckOutcome:
    """
    JSON-LD blocks and microdata. Full credit needs a JSON-LD block that parses
    and references the schema.org vocabulary.
    """
    json_ld_blocks = doc.select(is_json_ld_script)
    parsed = [parse_json_ld(el.source) for el in json_ld_blocks]
    invalid_count = sum(1 for payload in parsed if payload is None)
    has_schema_org = any(
        payload is not None and references_schema_org(el.source)
        for el, payload in zip(json_ld_blocks, parsed)
    )
    microdata_count = len(doc.select(is_microdata_scope))
    json_ld_count = len(json_ld_blocks)

    issues: List[Issue] = []
    if json_ld_count > 0 and has_schema_org:
        score = STRUCTURED_DATA_POINTS
    elif json_ld_count > 0 or microdata_count > 0:
        score = PARTIAL_STRUCTURED_DATA_POINTS
        issues.append(Issue(
            severity=Severity.INFO,
            message=(
                f"Found {json_ld_count} JSON-LD blocks, {microdata_count} microdata elements "
                f"(consider adding schema.org)"
            ),
            code="PARTIAL_STRUCTURED_DATA"
        ))
    else:
        score = 0
        issues.append(Issue(
            severity=Severity.WARNING,
            message="No structured data (JSON-LD / microdata) found",
            code="NO_STRUCTURED_DATA"
        ))

    if invalid_count:
        issues.append(Issue(
            severity=Severity.WARNING,
            message=f"{invalid_count}/{json_ld_count} JSON-LD blocks are not valid JSON",
            code="INVALID_JSON_LD"
        ))

    return CheckOutcome(score, issues, {
        "json_ld_count": json_ld_count,
        "invalid_json_ld_count": invalid_count,
        "has_schema_org": has_schema_org,
        "microdata_count": microdata_count,
    })


@audit_spec(codes=["ROBOTS_RESTRICTIVE", "NO_ROBOTS_META"])
def check_crawler_access(doc: HTMLDocument) -> CheckOutcome:
    """
    robots meta directive. No directive means crawlers fall back to default
    access, which is acceptable but not explicit.
    """
    robots = next(
        (el for el in doc.find_all("meta") if (el.get("name") or "").strip().lower() == "robots"),
        None
    )
    issues: List[Issue] = []
    if robots is None:
        score = ROBOTS_ABSENT_POINTS
        issues.append(Issue(
            severity=Severity.INFO,
            message="No robots meta tag; crawlers fall back to default access",
            code="NO_ROBOTS_META"
        ))
        content = None
    else:
        content = (robots.get("content") or "").strip().lower()
        if is_restrictive_robots(content):
            score = ROBOTS_RESTRICTIVE_POINTS
            issues.append(Issue(
                severity=Severity.WARNING,
                message=f'Robots meta restricts access: "{content}"',
                code="ROBOTS_RESTRICTIVE"
            ))
        else:
            score = ROBOTS_PERMISSIVE_POINTS

    return CheckOutcome(score, issues, {"robots_content": content})


# --- RULE ---

def evaluate(doc: HTMLDocument) -> RuleResult:
    checks = [
        check_model_context_script(doc),
        check_discovery_declaration(doc),
        check_structured_data(doc),
        check_crawler_access(doc),
    ]
    score = sum(outcome.score for outcome in checks)

    details = {}
    issues: List[Issue] = []
    for outcome in checks:
        details.update(outcome.details)
        issues.extend(outcome.issues)
    details["robots_score"] = checks[3].score

    def mark(flag: bool) -> str:
        return "✓" if flag else "✗"

    return RuleResult(
        rule=RULE_ID,
        score=score,
        message=(
            f"WebMCP: {mark(details['has_model_context'])} modelContext, "
            f"{mark(details['has_mcp_meta'])} MCP meta, "
            f"{details['json_ld_count']} JSON-LD, {details['microdata_count']} microdata"
        ),
        issues=tuple(issues),
        details=details
    )


# --- RULE DEFINITION ---
DEFINITION = RuleDefinition(
    rule_id=RULE_ID,
    label="WebMCP / Structured Data",
    evaluate=evaluate,
    checks=[check_model_context_script, check_discovery_declaration, check_structured_data, check_crawler_access],
    suggestions=[
        "Add JSON-LD structured data with schema.org vocabulary",
        "Consider implementing navigator.modelContext (WebMCP)",
        'Add <meta name="mcp-server"> for MCP endpoint discovery',
    ]
)
