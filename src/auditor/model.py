import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

SCORE_MIN = 0
SCORE_MAX = 100


class Severity(str, Enum):
    """Issue severity, declared in descending order of urgency."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Issue(BaseModel):
    """
    A single finding produced by a rule.
    Issues keep the order in which the rule emitted them.
    """
    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str
    code: Optional[str] = None  # e.g., 'MISSING_ALT', 'SKIPPED_HEADING_LEVEL'


class RuleResult(BaseModel):
    """
    Output of one rule: a 0-100 score plus the evidence behind it.
    """
    model_config = ConfigDict(frozen=True)

    rule: str  # stable key, e.g. 'semantic-html'
    score: int
    message: str
    issues: Tuple[Issue, ...] = ()
    details: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('score', mode='before')
    @classmethod
    def clamp_score(cls, v: Any) -> int:
        """Scores are always integers within [0, 100]."""
        if v is None:
            return SCORE_MIN
        value = float(v)
        if math.isnan(value):
            return SCORE_MIN
        value = max(SCORE_MIN, min(SCORE_MAX, value))
        return int(math.floor(value + 0.5))


class AuditReport(BaseModel):
    """
    The final, immutable result of one audit call.
    Serializes losslessly via model_dump_json / model_validate_json.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    score: int
    results: Tuple[RuleResult, ...] = ()

    def result_for(self, rule_id: str) -> Optional[RuleResult]:
        """Returns the result of a specific rule, or None if it is not part of the report."""
        for result in self.results:
            if result.rule == rule_id:
                return result
        return None
