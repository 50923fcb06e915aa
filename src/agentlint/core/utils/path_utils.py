# src/agentlint/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving package paths.
    Paths are resolved relative to this file so they work both from a source
    checkout and from an installed distribution.
    """

    @staticmethod
    def get_package_root() -> Path:
        """Returns the directory of the 'agentlint' package."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        """Returns the path of the bundled settings.json."""
        return PathUtils.get_package_root() / "settings.json"
