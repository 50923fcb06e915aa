import math
from collections import OrderedDict
from typing import Iterable, Mapping

from auditor.dom.scoring import clamp_score
from auditor.errors import WeightTableError
from auditor.model import RuleResult

# Default weight per rule id. The order of this table is the registration
# order: rules run and are reported in it.
RULE_WEIGHTS: "OrderedDict[str, float]" = OrderedDict([
    ("semantic-html", 0.25),
    ("aria-coverage", 0.25),
    ("selector-stability", 0.15),
    ("webmcp-support", 0.20),
    ("meta-info", 0.15),
])

WEIGHT_TOLERANCE = 1e-6


def validate_weights(weights: Mapping[str, float]) -> None:
    """
    Raises WeightTableError unless every weight is a finite, non-negative
    number and the table sums to 1.0 (within WEIGHT_TOLERANCE).
    """
    if not weights:
        raise WeightTableError("Weight table is empty")

    for rule_id, weight in weights.items():
        try:
            value = float(weight)
        except (TypeError, ValueError):
            raise WeightTableError(f"Weight for '{rule_id}' is not a number: {weight!r}")
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise WeightTableError(f"Weight for '{rule_id}' must be a finite, non-negative number, got {weight!r}")

    total = math.fsum(float(w) for w in weights.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise WeightTableError(f"Rule weights must sum to 1.0, got {total:.6f}")


def aggregate(results: Iterable[RuleResult], weights: Mapping[str, float] = RULE_WEIGHTS) -> int:
    """
    Weighted sum of rule scores, rounded half-up and clamped to [0, 100].

    Every weighted rule must have exactly one result and every result must
    belong to a weighted rule. The sum is exactly rounded, so the order in
    which results were collected never changes the outcome.
    """
    by_rule = {}
    for result in results:
        if result.rule in by_rule:
            raise WeightTableError(f"Duplicate result for rule '{result.rule}'")
        if result.rule not in weights:
            raise WeightTableError(f"No weight registered for rule '{result.rule}'")
        by_rule[result.rule] = result

    missing = [rule_id for rule_id in weights if rule_id not in by_rule]
    if missing:
        raise WeightTableError(f"Missing results for rules: {', '.join(missing)}")

    return clamp_score(math.fsum(by_rule[rule_id].score * float(w) for rule_id, w in weights.items()))


# A broken built-in table fails on import, not on the first audit.
validate_weights(RULE_WEIGHTS)
