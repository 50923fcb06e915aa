# src/crawler/model.py (Fetch Layer)
import logging
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class FetchResult(BaseModel):
    """
    Outcome of one page retrieval.

    Transport failures (DNS, refused connection, timeout, too many redirects)
    are reported with status -1 and `error` set; they are never raised.
    """
    url: str
    final_url: Optional[str] = None
    status: int
    reason: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    content: Optional[str] = None
    error: Optional[str] = None
    elapsed_time: float = 0.0

    @field_validator("headers", mode="before")
    @classmethod
    def _stringify_headers(cls, v):
        if v is None:
            return {}
        # CIMultiDictProxy and friends: keep the first value per header name.
        out = {}
        for key, value in dict(v).items():
            out.setdefault(str(key), str(value))
        return out

    @property
    def is_transport_error(self) -> bool:
        return self.status < 0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value.lower()
        return ""
