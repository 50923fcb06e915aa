# tests/dom/test_registry.py
import pytest

from auditor.aggregator import RULE_WEIGHTS
from auditor.dom.core import RuleDefinition
from auditor.dom.qngine import QNGINE
from auditor.dom.registry import RuleRegistry
from auditor.errors import WeightTableError


def test_discovers_all_rules():
    ids = {definition.rule_id for definition in RuleRegistry.get_all_definitions()}
    assert ids == set(RULE_WEIGHTS)


def test_build_table_follows_weight_order():
    table = RuleRegistry.build_table(RULE_WEIGHTS)
    assert [entry.definition.rule_id for entry in table] == list(RULE_WEIGHTS)
    assert [entry.weight for entry in table] == list(RULE_WEIGHTS.values())


def test_build_table_rejects_unknown_rule():
    weights = {**RULE_WEIGHTS, "mystery": 0.0}
    with pytest.raises(WeightTableError, match="unknown"):
        RuleRegistry.build_table(weights)


def test_build_table_rejects_unweighted_rule():
    weights = {"semantic-html": 0.5, "aria-coverage": 0.5}
    with pytest.raises(WeightTableError, match="without a weight"):
        RuleRegistry.build_table(weights)


def test_build_table_rejects_bad_sum():
    weights = dict(RULE_WEIGHTS, **{"meta-info": 0.5})
    with pytest.raises(WeightTableError, match="sum to 1.0"):
        RuleRegistry.build_table(weights)


def test_all_possible_codes():
    codes = RuleRegistry.get_all_possible_codes()
    assert codes == sorted(codes)
    for code in ("MISSING_ALT", "SKIPPED_HEADING_LEVEL", "HASH_CLASSES_DOMINANT", "INVALID_JSON_LD", "MISSING_TITLE"):
        assert code in codes


def test_definition_lookup():
    definition = RuleRegistry.get_definition("aria-coverage")
    assert isinstance(definition, RuleDefinition)
    assert definition.label == "ARIA Coverage"
    assert RuleRegistry.get_definition("mystery") is None


def test_definition_collects_check_codes():
    def evaluate(doc):
        raise NotImplementedError

    def check(doc):
        raise NotImplementedError
    check.defined_codes = ["B_CODE", "A_CODE"]

    definition = RuleDefinition("x", "X", evaluate, checks=[check], possible_codes=["C_CODE"])
    assert definition.codes == ["A_CODE", "B_CODE", "C_CODE"]


# --- Engine ---

def test_engine_fails_fast_on_bad_weights():
    with pytest.raises(WeightTableError):
        QNGINE(weights={"semantic-html": 1.0})


def test_engine_rejects_explicitly_empty_weights():
    with pytest.raises(WeightTableError, match="empty"):
        QNGINE(weights={})


def test_engine_results_follow_registration_order(full_page):
    engine = QNGINE(parallel=True)
    results = engine.evaluate(full_page)
    assert [r.rule for r in results] == list(RULE_WEIGHTS)
    assert engine.rule_ids == list(RULE_WEIGHTS)
    assert engine.aggregate(results) == 100


def test_parallel_and_sequential_evaluation_agree(parse):
    doc = parse('<div class="css-1q2w3e4"><h2>x</h2><img src="a.png"><a href="/"></a></div>')
    parallel = QNGINE(parallel=True).evaluate(doc)
    sequential = QNGINE(parallel=False).evaluate(doc)
    assert parallel == sequential


def test_engine_reads_weights_from_config(monkeypatch):
    from agentlint.core.managers.config_manager import config_manager

    custom = {"semantic-html": 1.0, "aria-coverage": 0.0, "selector-stability": 0.0,
              "webmcp-support": 0.0, "meta-info": 0.0}
    monkeypatch.setitem(config_manager.get_all().setdefault("auditor", {}), "weights", custom)
    engine = QNGINE()
    assert engine.weights == custom
