"""Constrained-input platform detection."""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

# Phones and tablets where the map is often hidden while locations are edited.
_MOBILE_UA = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini|Mobile",
    re.IGNORECASE,
)


def is_constrained_platform(user_agent: Optional[str], override: str = "auto") -> bool:
    """Decide whether the client is a space-constrained, touch-primary platform.

    Args:
        user_agent: Raw User-Agent header, may be None
        override: "true" or "false" to force the result, "auto" to sniff

    Returns:
        True for constrained platforms
    """
    if override == "true":
        return True
    if override == "false":
        return False

    constrained = bool(user_agent) and _MOBILE_UA.search(user_agent) is not None
    logger.debug(f"Platform detection: constrained={constrained} ua={user_agent!r}")
    return constrained
