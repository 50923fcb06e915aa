import asyncio
import logging
from typing import Optional

from agentlint.core.managers.config_manager import config_manager
from agentlint.core.utils.configure_logging import configure_logger
from auditor.controllers.audit_controller import AuditController, Fetcher
from auditor.model import AuditReport

logger = logging.getLogger(__name__)


def init_logging() -> logging.Logger:
    """Initialize logging based on configuration."""
    return configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        config_manager.get_nested("debug.module_levels", {}),
        config_manager.get_nested("debug.silenced_loggers")
    )


async def audit_async(url: str, fetcher: Optional[Fetcher] = None) -> AuditReport:
    """
    Audits the page at `url` and returns its AuditReport.

    Raises:
        InvalidUrlError, UnsupportedSchemeError: the target is rejected before retrieval.
        FetchFailedError: transport failure (DNS, connection, timeout).
        HttpStatusError: the server answered with a non-2xx status.
    """
    return await AuditController(fetcher=fetcher).run_audit(url)


def audit(url: str, fetcher: Optional[Fetcher] = None) -> AuditReport:
    """Synchronous form of `audit_async`; runs on a fresh event loop."""
    return asyncio.run(audit_async(url, fetcher=fetcher))


def audit_markup(html: str, url: str = "about:blank") -> AuditReport:
    """Scores markup the caller already holds. No URL validation or retrieval."""
    return AuditController().audit_markup(html, url)
