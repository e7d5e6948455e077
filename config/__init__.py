"""Configuration package for the live coverage engine."""
from .registry import HIGHEST_CONFIDENCE, LAST_WRITE_WINS, bind_policy, get_policy, policy_names
from .settings import Settings, settings

__all__ = [
    "HIGHEST_CONFIDENCE",
    "LAST_WRITE_WINS",
    "bind_policy",
    "get_policy",
    "policy_names",
    "Settings",
    "settings",
]
