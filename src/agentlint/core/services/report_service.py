import json
import logging
from typing import Any, Dict, List

from auditor.dom.qngine import resolve_weights
from auditor.dom.registry import RuleRegistry
from auditor.model import AuditReport

logger = logging.getLogger(__name__)


def to_json(report: AuditReport, indent: int = 2, ensure_ascii: bool = False) -> str:
    """
    Convert an AuditReport to a JSON string.

    Args:
        report: The report to serialize.
        indent: Indentation level for pretty-printing (default: 2)
        ensure_ascii: If True, escape non-ASCII chars (default: False)

    Returns:
        str: JSON string; the timestamp is ISO-8601 and `details` maps are kept verbatim.
    """
    return json.dumps(report.model_dump(mode="json"), ensure_ascii=ensure_ascii, indent=indent)


def from_json(text: str) -> AuditReport:
    """Rebuilds an AuditReport from the output of `to_json`."""
    return AuditReport.model_validate_json(text)


def rule_table() -> Dict[str, Dict[str, Any]]:
    """
    Presentation table: rule id -> label, weight and suggested remediations,
    in registration order. Weights follow the same precedence as the engine.
    """
    weights = resolve_weights()
    table = {}
    for rule_id, weight in weights.items():
        definition = RuleRegistry.get_definition(rule_id)
        if definition is None:
            logger.warning(f"No definition registered for rule '{rule_id}'")
            continue
        table[rule_id] = {
            "label": definition.label,
            "weight": weight,
            "suggestions": list(definition.suggestions),
        }
    return table


def top_suggestions(report: AuditReport, limit: int = 3) -> List[str]:
    """
    Remediations drawn from the lowest-scoring rules first. Rules with a
    perfect score contribute nothing; ties keep the report's rule order.
    """
    table = rule_table()
    # sorted() is stable, so equal scores stay in registration order.
    ranked = sorted((r for r in report.results if r.score < 100), key=lambda r: r.score)

    suggestions: List[str] = []
    for result in ranked:
        for suggestion in table.get(result.rule, {}).get("suggestions", []):
            if len(suggestions) >= limit:
                return suggestions
            suggestions.append(suggestion)
    return suggestions
