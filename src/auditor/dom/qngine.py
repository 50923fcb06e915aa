# src/auditor/dom/qngine.py
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional

from agentlint.core.managers.config_manager import config_manager
from auditor.aggregator import RULE_WEIGHTS, aggregate
from auditor.model import RuleResult
from .models import HTMLDocument
from .registry import RuleEntry, RuleRegistry

logger = logging.getLogger(__name__)


def resolve_weights(weights: Optional[Mapping[str, float]] = None) -> Dict[str, float]:
    """The argument when given, else the 'auditor.weights' setting, else RULE_WEIGHTS."""
    if weights is None:
        weights = config_manager.get_nested("auditor.weights")
    if weights is None:
        weights = RULE_WEIGHTS
    return dict(weights)


class QNGINE:
    """
    Quality Engine (QNGINE) for scoring HTML Documents.

    Runs every registered rule against one parsed document and aggregates the
    rule scores with the weight table. Rules are pure functions over an
    immutable document, so they may run concurrently; results are always
    returned in registration order.
    """

    def __init__(self, weights: Optional[Mapping[str, float]] = None, parallel: Optional[bool] = None,
                 max_workers: Optional[int] = None):
        """
        Builds the rule table. A misconfigured weight table raises
        WeightTableError here, before any document is audited.

        Weights come from the argument, then the 'auditor.weights' setting,
        then the built-in table. An explicitly empty table is rejected, not
        replaced by the defaults.
        """
        self.weights = resolve_weights(weights)
        self.table: List[RuleEntry] = RuleRegistry.build_table(self.weights)
        self.parallel = (
            parallel if parallel is not None
            else bool(config_manager.get_nested("auditor.parallel_rules", True))
        )
        self.max_workers = max_workers or int(config_manager.get_nested("auditor.max_workers", 5))

    @property
    def rule_ids(self) -> List[str]:
        return [entry.definition.rule_id for entry in self.table]

    def _run_rule(self, entry: RuleEntry, doc: HTMLDocument) -> RuleResult:
        start = time.perf_counter()
        result = entry.definition.evaluate(doc)
        logger.debug(
            f"Rule '{entry.definition.rule_id}' scored {result.score} "
            f"({len(result.issues)} issues) in {time.perf_counter() - start:.4f}s"
        )
        return result

    def evaluate(self, doc: HTMLDocument) -> List[RuleResult]:
        """
        Runs the full rule suite on a parsed HTMLDocument.

        Returns:
            List[RuleResult]: one result per rule, in registration order.
        """
        if not self.parallel or len(self.table) < 2:
            return [self._run_rule(entry, doc) for entry in self.table]

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="rule") as executor:
            # map() yields in submission order regardless of completion order.
            return list(executor.map(lambda entry: self._run_rule(entry, doc), self.table))

    def aggregate(self, results: Iterable[RuleResult]) -> int:
        return aggregate(results, self.weights)
