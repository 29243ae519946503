"""Cache file path utilities for infrareport.

Contains functions for getting paths to cache files:
- get_cache_dir: Get the cache directory under ~/.infrareport
- get_cache_file: Get path to the analysis cache JSON file
"""

from pathlib import Path
from typing import Optional

CACHE_FILE_NAME = "analysis_cache.json"


def get_cache_dir(base_dir: Optional[Path] = None) -> Path:
    """Return the cache directory path.

    The directory is not created here; the cache creates it on first write.

    Args:
        base_dir: Base configuration directory. Defaults to ~/.infrareport.

    Returns:
        Path to the cache directory.
    """
    if base_dir is None:
        from infrareport.global_config import get_global_config_dir

        base_dir = get_global_config_dir()
    return Path(base_dir) / "cache"


def get_cache_file(base_dir: Optional[Path] = None) -> Path:
    """Return path to the analysis cache file.

    Args:
        base_dir: Base configuration directory. Defaults to ~/.infrareport.

    Returns:
        Path to analysis_cache.json.
    """
    return get_cache_dir(base_dir) / CACHE_FILE_NAME
