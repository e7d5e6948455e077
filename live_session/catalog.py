"""Read-only framework catalog and its built-in frameworks."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Protocol

from pydantic import BaseModel, Field

from live_session.models import Framework, FrameworkField


class FrameworkCatalog(Protocol):  # Lookup interface consumed by the engine
    def get(self, framework_id: str) -> Framework: ...

    def list(self) -> List[Framework]: ...


class CatalogDocument(BaseModel):  # On-disk catalog layout
    frameworks: List[Framework] = Field(default_factory=list)


MEDDPICC = Framework(
    id="meddpicc",
    name="MEDDPICC",
    fields=[
        FrameworkField(
            key="metrics",
            label="Metrics",
            prompt="Extract quantifiable business metrics, KPIs, or numerical impact",
            questions=[
                "What specific metrics are you trying to improve?",
                "How do you measure success today?",
                "What would a 10% improvement mean for your business?",
            ],
        ),
        FrameworkField(
            key="economic_buyer",
            label="Economic Buyer",
            prompt="Identify who has budget authority and final spending approval",
            questions=[
                "Who has the final say on budget for this project?",
                "Who typically approves investments of this size?",
                "Can you walk me through your approval process?",
            ],
        ),
        FrameworkField(
            key="decision_criteria",
            label="Decision Criteria",
            prompt="Capture the criteria and requirements used to evaluate solutions",
            questions=[
                "What are your must-haves vs. nice-to-haves?",
                "How will you evaluate different solutions?",
                "What would make this a clear win for your team?",
            ],
        ),
        FrameworkField(
            key="decision_process",
            label="Decision Process",
            prompt="Map out the steps and stakeholders in the buying process",
            questions=[
                "Walk me through how decisions like this typically get made",
                "Who needs to be involved at each stage?",
                "What could slow down or derail this process?",
            ],
        ),
        FrameworkField(
            key="paper_process",
            label="Paper Process",
            required=False,
            prompt="Understand the procurement, legal, and contracting process",
            questions=[
                "What does the contracting process look like?",
                "Are there any procurement or legal requirements?",
                "What documents or approvals are needed?",
            ],
        ),
        FrameworkField(
            key="identify_pain",
            label="Identify Pain",
            prompt="Uncover the business problems and pain points driving this purchase",
            questions=[
                "What happens if you don't solve this problem?",
                "How is this impacting your team day-to-day?",
                "What triggered you to start looking for a solution now?",
            ],
        ),
        FrameworkField(
            key="champion",
            label="Champion",
            prompt="Identify internal advocates who will sell on your behalf",
            questions=[
                "Who internally is most excited about this project?",
                "Who will help us navigate the organization?",
                "Who stands to benefit most from this solution?",
            ],
        ),
        FrameworkField(
            key="competition",
            label="Competition",
            required=False,
            prompt="Understand competitive alternatives and preferences",
            questions=[
                "What other solutions are you evaluating?",
                "Have you worked with any of these vendors before?",
                "What do you like or dislike about the alternatives?",
            ],
        ),
    ],
)

BANT = Framework(
    id="bant",
    name="BANT",
    fields=[
        FrameworkField(
            key="budget",
            label="Budget",
            prompt="Determine if budget is allocated or available",
            questions=[
                "What budget have you allocated for this?",
                "Is budget approved or do we need to build a case?",
            ],
        ),
        FrameworkField(
            key="authority",
            label="Authority",
            prompt="Identify decision-makers and approval process",
            questions=["Who makes the final decision?", "Who else is involved in the approval?"],
        ),
        FrameworkField(
            key="need",
            label="Need",
            prompt="Understand the problem and urgency",
            questions=["What problem are you trying to solve?", "What happens if you don't address this?"],
        ),
        FrameworkField(
            key="timeline",
            label="Timeline",
            prompt="Establish when they need to implement",
            questions=["When do you need this in place?", "What's driving that timeline?"],
        ),
    ],
)


class StaticFrameworkCatalog:
    """In-memory catalog keyed by framework id; insertion order is listing order."""

    def __init__(self, frameworks: Iterable[Framework] = (MEDDPICC, BANT)) -> None:
        self._frameworks: Dict[str, Framework] = {}
        for framework in frameworks:
            if framework.id in self._frameworks:
                raise ValueError(f"duplicate framework id: {framework.id}")
            self._frameworks[framework.id] = framework

    def get(self, framework_id: str) -> Framework:
        """Return the framework for ``framework_id``.

        Raises:
            KeyError: If the catalog has no such framework.
        """

        if framework_id not in self._frameworks:
            raise KeyError(framework_id)
        return self._frameworks[framework_id]

    def list(self) -> List[Framework]:
        return list(self._frameworks.values())


def load_catalog(path: Path) -> StaticFrameworkCatalog:
    """Load a catalog from a JSON document ``{"frameworks": [...]}``."""

    data = Path(path).read_text(encoding="utf-8")
    document = CatalogDocument.model_validate_json(data)
    return StaticFrameworkCatalog(document.frameworks)


__all__ = [
    "BANT",
    "CatalogDocument",
    "FrameworkCatalog",
    "MEDDPICC",
    "StaticFrameworkCatalog",
    "load_catalog",
]
