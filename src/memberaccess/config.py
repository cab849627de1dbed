"""
Framework configuration for memberaccess.

Module-level switches read by the resolver. Defaults suit production use;
tests flip them and restore them afterwards.
"""

import logging

logger = logging.getLogger(__name__)

_resolution_cache_enabled: bool = True


def set_resolution_cache_enabled(enabled: bool) -> None:
    """Turn the process-wide (type, name) resolution cache on or off.

    Disabling the cache never changes results, only how often the hierarchy
    is walked. Member tables stay cached either way.

    Args:
        enabled: True to cache resolutions, False to resolve on every call
    """
    global _resolution_cache_enabled
    _resolution_cache_enabled = bool(enabled)
    logger.debug(f"Resolution cache enabled={_resolution_cache_enabled}")


def is_resolution_cache_enabled() -> bool:
    """Get whether resolutions are cached."""
    return _resolution_cache_enabled
