"""Element resolution: strategies, fallback chains and the matcher."""
from .matcher import ElementMatcher
from .strategies import (
    CLICK_CHAIN,
    ELEMENT_CHAIN,
    FIELD_CHAIN,
    LINK_CHAIN,
    STRICT_STRATEGIES,
    Strategy,
)

__all__ = [
    "ElementMatcher",
    "CLICK_CHAIN",
    "ELEMENT_CHAIN",
    "FIELD_CHAIN",
    "LINK_CHAIN",
    "STRICT_STRATEGIES",
    "Strategy",
]
