"""In-memory registry of extraction merge policies."""
from typing import Any, Callable, Dict

_REGISTRY: Dict[str, Callable[[], Any]] = {}


def bind_policy(key: str, factory: Callable[[], Any]) -> None:
    """Bind a merge-policy factory to a registry key."""
    _REGISTRY[key] = factory


def get_policy(key: str) -> Any:
    """Build the merge policy registered under ``key``.

    Raises:
        KeyError: If no factory has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Merge policy not bound in registry: {key}")
    return _REGISTRY[key]()


def policy_names() -> list[str]:
    return sorted(_REGISTRY)


LAST_WRITE_WINS = "last_write_wins"
HIGHEST_CONFIDENCE = "highest_confidence"
