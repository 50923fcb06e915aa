# tests/rules/test_selector_stability.py
from auditor.model import Severity
from auditor.rules import selector_stability
from auditor.rules.selector_stability import check_class_stability, check_test_id_coverage


def test_full_page_scores_100(full_page):
    result = selector_stability.evaluate(full_page)
    assert result.rule == "selector-stability"
    assert result.score == 100
    assert result.issues == ()
    assert result.details["test_id_count"] == 3
    assert result.details["interactive_with_test_id"] == 3


def test_partial_test_id_coverage_is_info(parse):
    doc = parse('<body><button data-testid="a">A</button><button>B</button></body>')
    outcome = check_test_id_coverage(doc)
    assert outcome.score == 50
    assert [i.code for i in outcome.issues] == ["PARTIAL_TEST_ID_COVERAGE"]
    assert outcome.issues[0].severity == Severity.INFO

    # 50 * 0.5 + 100 * 0.5
    assert selector_stability.evaluate(doc).score == 75


def test_low_test_id_coverage_is_a_warning(parse):
    doc = parse("<body>" + '<a href="/">x</a>' * 20 + '<button data-cy="go">Go</button></body>')
    outcome = check_test_id_coverage(doc)
    assert outcome.score == 5
    assert outcome.issues[0].code == "LOW_TEST_ID_COVERAGE"
    assert outcome.issues[0].severity == Severity.WARNING
    assert "1/21" in outcome.issues[0].message


def test_role_based_interactive_elements(parse):
    doc = parse('<body><div role="button" data-qa="x">X</div><span role="link">Y</span></body>')
    outcome = check_test_id_coverage(doc)
    assert outcome.details["interactive_total"] == 2
    assert outcome.details["interactive_with_test_id"] == 1


def test_dominant_hash_classes(parse):
    doc = parse('<body><div class="css-1q2w3e4"></div><div class="sc-bdVaJa"></div><div class="card"></div></body>')
    outcome = check_class_stability(doc)
    assert outcome.details["hash_ratio"] == 67
    assert outcome.score == 33
    assert outcome.issues[0].code == "HASH_CLASSES_DOMINANT"
    assert outcome.issues[0].severity == Severity.WARNING


def test_some_hash_classes_are_info(parse):
    doc = parse('<body><div class="css-1q2w3e4"></div><div class="card"></div><p class="lead"></p></body>')
    outcome = check_class_stability(doc)
    assert outcome.score == 67
    assert outcome.issues[0].code == "HASH_CLASSES_PRESENT"
    assert outcome.issues[0].severity == Severity.INFO


def test_non_content_tags_are_ignored(parse):
    doc = parse('<body><script class="css-1q2w3e4"></script><link class="jsx-123456"><p class="intro"></p></body>')
    outcome = check_class_stability(doc)
    assert outcome.details["total_classed_elements"] == 1
    assert outcome.score == 100


def test_empty_body(parse):
    result = selector_stability.evaluate(parse("<html><body></body></html>"))
    assert result.score == 100
    assert result.issues == ()
    assert result.message == "No elements found to analyze"
