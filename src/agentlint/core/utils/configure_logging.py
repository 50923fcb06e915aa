import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

DEFAULT_SILENCED_LOGGERS: Dict[str, str] = {
    "aiohttp": "WARNING",
    "asyncio": "WARNING",
}

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"


class LogWithTqdm(logging.Handler):
    """
    A logging handler that redirects output to `tqdm.write()`, so log lines
    never tear through a progress bar a presenter may be drawing.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            # Write to stderr for consistency with tqdm's default stream.
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level: Union[str, int, None], fallback: int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    if isinstance(level, int):
        return level
    return fallback


def configure_logger(
        general_level: Union[str, int, None] = 'INFO',
        module_specific_levels: Optional[Dict[str, Union[str, int]]] = None,
        silenced_loggers: Optional[Dict[str, Union[str, int]]] = None
) -> logging.Logger:
    """
    Configures the root logger with a single TQDM-friendly handler and
    applies per-module levels. Returns the root logger.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))

    # Replace whatever was installed before.
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    silenced = DEFAULT_SILENCED_LOGGERS if silenced_loggers is None else silenced_loggers
    for name, level in silenced.items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))

    return root_logger
