from typing import Any, Callable, Dict, List, NamedTuple, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from agentlint.core.managers.config_manager import config_manager
from auditor.model import Issue, RuleResult

# Tags whose raw inner content is kept on the element (scripts are scanned for keywords).
RAW_CONTENT_TAGS = ("script", "style", "template")


def audit_spec(codes: List[str]):
    """
    Decorator to declare which issue codes a specific check function emits.
    Facilitates auto-discovery by the RuleRegistry.
    """
    def decorator(func):
        func.defined_codes = codes
        return func
    return decorator


def rule_setting(rule_key: str, name: str, default: Any) -> Any:
    """Reads a scaling constant from the 'rules.<rule_key>' section of the configuration."""
    return config_manager.get_nested(f"rules.{rule_key}.{name}", default)


class ElementBase(BaseModel):
    """
    Immutable snapshot of one element of a parsed document.

    Elements are stored flat, in document order; `parent` is the index of the
    parent element and `depth` its nesting level (0 for top-level elements).
    """
    model_config = ConfigDict(frozen=True)

    index: int
    tag: str
    attrs: Dict[str, str] = Field(default_factory=dict)
    text: str = ""  # own text only; HTMLDocument.text joins the subtree
    source: str = ""  # raw inner content for script, style and template
    parent: Optional[int] = None
    depth: int = 0

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Attribute value, or `default` when the attribute is absent."""
        return self.attrs.get(name, default)

    def has(self, name: str) -> bool:
        return name in self.attrs

    def has_value(self, name: str) -> bool:
        """True when the attribute is present and not blank."""
        return bool((self.attrs.get(name) or "").strip())

    @property
    def classes(self) -> List[str]:
        return (self.attrs.get("class") or "").split()


class CheckOutcome(NamedTuple):
    """Result of one sub-check inside a rule: sub-score, issues and evidence."""
    score: int
    issues: List[Issue]
    details: Dict[str, Any]


class RuleDefinition:
    """
    Configuration object binding a rule id to its evaluation function,
    sub-checks and the presentation data consumers key off.
    """

    def __init__(
            self,
            rule_id: str,
            label: str,
            evaluate: Callable[[Any], RuleResult],
            checks: Optional[List[Callable[[Any], CheckOutcome]]] = None,
            suggestions: Optional[List[str]] = None,
            possible_codes: Optional[List[str]] = None
    ):
        self.rule_id = rule_id
        self.label = label
        self.evaluate = evaluate
        self.checks = checks or []
        self.suggestions = list(suggestions or [])

        # --- Auto-Discovery of Issue Codes ---
        final_codes: Set[str] = set(possible_codes or [])

        for check in self.checks:
            if hasattr(check, 'defined_codes'):
                final_codes.update(check.defined_codes)

        self.codes = sorted(list(final_codes))

    def __repr__(self) -> str:
        return f"RuleDefinition({self.rule_id!r})"
