"""Coaching prompt sources and alert rules."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from live_session.coverage import compute
from live_session.models import Alert, Extraction, Framework

DEFAULT_SUGGESTIONS: Tuple[str, ...] = (
    "Ask: Who else besides the CFO needs to sign off on this decision, and what's important to them?",
    "Ask: What happens if you don't solve this by Q1? What's the business impact?",
    "Ask: Have you evaluated any other solutions? What did you like or not like about them?",
    "Ask: Walk me through how a typical order flows through your system today.",
    "Ask: Beyond the VP of Operations, who else will be affected by this change?",
)

MONOLOGUE_MESSAGE = (
    "You've been talking for 3+ minutes. Consider asking a question to engage the prospect."
)


class SuggestionCycle:
    """Finite prompt list read as an endless cycle.

    The index wraps modulo the list length, so the cycle can never be
    exhausted; ``reset`` starts it over from the first prompt.
    """

    def __init__(self, prompts: Sequence[str] = DEFAULT_SUGGESTIONS) -> None:
        if not prompts:
            raise ValueError("SuggestionCycle needs at least one prompt")
        self._prompts = tuple(prompts)
        self._index = 0

    def __iter__(self) -> "SuggestionCycle":
        return self

    def __next__(self) -> Tuple[int, str]:
        index = self._index
        self._index = (self._index + 1) % len(self._prompts)
        return index, self._prompts[index]

    def __len__(self) -> int:
        return len(self._prompts)

    @property
    def position(self) -> int:
        return self._index

    def reset(self) -> None:
        self._index = 0


class GapTargeter:
    """Pick a framework question for the first missing required field."""

    def __init__(self, framework: Framework) -> None:
        self.framework = framework
        self._asked: Dict[str, int] = {}

    def next_question(self, snapshot: Mapping[str, Extraction]) -> Optional[Tuple[str, str]]:
        """Return ``(field_key, question)`` or ``None`` when no gap has a question."""

        result = compute(self.framework, snapshot)
        for key in result.missing_required():
            item = self.framework.get_field(key)
            if item is None or not item.questions:
                continue
            count = self._asked.get(key, 0)
            self._asked[key] = count + 1
            return key, item.questions[count % len(item.questions)]
        return None


def monologue_alerts(segment_count: int, threshold: int) -> List[Alert]:
    """Level-triggered monologue advisory; present while the count exceeds ``threshold``."""

    if segment_count > threshold:
        return [Alert(kind="monologue", message=MONOLOGUE_MESSAGE)]
    return []


__all__ = [
    "DEFAULT_SUGGESTIONS",
    "GapTargeter",
    "MONOLOGUE_MESSAGE",
    "SuggestionCycle",
    "monologue_alerts",
]
