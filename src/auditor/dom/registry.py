# src/auditor/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Mapping, NamedTuple, Optional, Set

from auditor.aggregator import validate_weights
from auditor.errors import WeightTableError
from .core import RuleDefinition

logger = logging.getLogger(__name__)


class RuleEntry(NamedTuple):
    definition: RuleDefinition
    weight: float


class RuleRegistry:
    """
    Central registry for scoring rules.

    Dynamically discovers RuleDefinition modules from the 'auditor.rules'
    package and combines them with a weight table into the ordered rule
    table consumed by the engine and the aggregator.
    """

    _definitions: Dict[str, RuleDefinition] = {}
    _all_codes: Set[str] = set()
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """
        Registers every `DEFINITION` (instance of `RuleDefinition`) found in
        the modules of the 'auditor.rules' package and collects their issue codes.

        Import errors propagate: a rule that cannot be loaded is a broken install,
        not something to audit around.
        """
        if cls._loaded:
            return

        import auditor.rules as rules_pkg

        for _, name, _ in pkgutil.iter_modules(rules_pkg.__path__):
            module = importlib.import_module(f"auditor.rules.{name}")
            defn = getattr(module, "DEFINITION", None)
            if not isinstance(defn, RuleDefinition):
                continue
            if defn.rule_id in cls._definitions:
                raise WeightTableError(f"Rule id '{defn.rule_id}' is defined twice")

            cls._definitions[defn.rule_id] = defn
            cls._all_codes.update(defn.codes)
            logger.debug(f"Rule loaded: {defn.rule_id}")

        cls._loaded = True

    @classmethod
    def build_table(cls, weights: Mapping[str, float]) -> List[RuleEntry]:
        """
        Pairs every discovered rule with its weight, in the order of `weights`.

        Raises:
            WeightTableError: if the weights do not sum to 1.0, name an unknown
                rule, or leave a discovered rule without a weight.
        """
        cls.discover()
        validate_weights(weights)

        unknown = [rule_id for rule_id in weights if rule_id not in cls._definitions]
        if unknown:
            raise WeightTableError(f"Weights reference unknown rules: {', '.join(unknown)}")

        unweighted = [rule_id for rule_id in cls._definitions if rule_id not in weights]
        if unweighted:
            raise WeightTableError(f"Rules without a weight: {', '.join(sorted(unweighted))}")

        return [RuleEntry(cls._definitions[rule_id], float(weight)) for rule_id, weight in weights.items()]

    @classmethod
    def get_definition(cls, rule_id: str) -> Optional[RuleDefinition]:
        cls.discover()
        return cls._definitions.get(rule_id)

    @classmethod
    def get_all_definitions(cls) -> List[RuleDefinition]:
        cls.discover()
        return list(cls._definitions.values())

    @classmethod
    def get_all_possible_codes(cls) -> List[str]:
        """Returns every unique issue code the registered rules can emit."""
        cls.discover()
        return sorted(list(cls._all_codes))
