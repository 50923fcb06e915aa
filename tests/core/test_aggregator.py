# tests/core/test_aggregator.py
import itertools
import math
from collections import OrderedDict
from pathlib import Path

import pytest

from auditor.aggregator import RULE_WEIGHTS, aggregate, validate_weights
from auditor.errors import WeightTableError
from auditor.model import RuleResult

SCORES = {
    "semantic-html": 100,
    "aria-coverage": 50,
    "selector-stability": 0,
    "webmcp-support": 80,
    "meta-info": 60,
}


def make_results(scores):
    return [RuleResult(rule=rule, score=score, message="") for rule, score in scores.items()]


def test_default_weights_are_valid_and_ordered():
    validate_weights(RULE_WEIGHTS)
    assert list(RULE_WEIGHTS) == [
        "semantic-html", "aria-coverage", "selector-stability", "webmcp-support", "meta-info"
    ]
    assert math.isclose(sum(RULE_WEIGHTS.values()), 1.0)


def test_aggregate_is_weighted_and_rounded_half_up():
    # 25 + 12.5 + 0 + 16 + 9 = 62.5
    assert aggregate(make_results(SCORES)) == 63


def test_aggregate_is_independent_of_collection_order():
    results = make_results(SCORES)
    outcomes = {aggregate(list(order)) for order in itertools.permutations(results)}
    assert outcomes == {63}


def test_aggregate_with_custom_table():
    weights = OrderedDict([("a", 0.1)] + [(f"r{i}", 0.1) for i in range(9)])
    results = [RuleResult(rule=rule, score=100, message="") for rule in weights]
    assert aggregate(results, weights) == 100
    assert aggregate(reversed(results), weights) == 100


def test_all_zero_and_all_full():
    assert aggregate(make_results({rule: 0 for rule in RULE_WEIGHTS})) == 0
    assert aggregate(make_results({rule: 100 for rule in RULE_WEIGHTS})) == 100


def test_aggregate_rejects_missing_results():
    partial = make_results({"semantic-html": 100})
    with pytest.raises(WeightTableError, match="Missing results"):
        aggregate(partial)


def test_aggregate_rejects_unknown_and_duplicate_rules():
    with pytest.raises(WeightTableError, match="No weight"):
        aggregate(make_results({**SCORES, "mystery": 10}))

    results = make_results(SCORES)
    with pytest.raises(WeightTableError, match="Duplicate"):
        aggregate(results + results[:1])


@pytest.mark.parametrize("weights", [
    {},
    {"a": 0.5, "b": 0.4},
    {"a": 1.2, "b": -0.2},
    {"a": float("nan"), "b": 1.0},
    {"a": "heavy", "b": 1.0},
])
def test_validate_weights_rejects_bad_tables(weights):
    with pytest.raises(WeightTableError):
        validate_weights(weights)


def test_weight_table_error_is_a_value_error():
    assert issubclass(WeightTableError, ValueError)


def test_broken_built_in_table_fails_on_import():
    import auditor.aggregator as aggregator_module

    source = Path(aggregator_module.__file__).read_text(encoding="utf-8")
    broken = source.replace('("meta-info", 0.15)', '("meta-info", 0.05)')
    assert broken != source

    with pytest.raises(WeightTableError, match="sum to 1.0"):
        exec(compile(broken, aggregator_module.__file__, "exec"), {"__name__": "auditor.aggregator_copy"})
