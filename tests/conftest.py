import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from live_session.catalog import MEDDPICC
from live_session.clock import ManualClock
from live_session.controller import LiveSession, LiveSessionConfig
from live_session.models import Framework, FrameworkField


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def framework():
    return Framework(
        id="mini",
        name="Mini",
        fields=[
            FrameworkField(key="metrics", label="Metrics"),
            FrameworkField(key="economic_buyer", label="Economic Buyer"),
            FrameworkField(
                key="champion",
                label="Champion",
                questions=["Who internally is most excited about this project?"],
            ),
        ],
    )


@pytest.fixture
def session_factory(clock):
    created = []

    def _make(framework=MEDDPICC, **kwargs):
        kwargs.setdefault("config", LiveSessionConfig(suggestion_seed=7))
        kwargs.setdefault("clock", clock)
        session = LiveSession(framework, **kwargs)
        created.append(session)
        return session

    yield _make
    for session in created:
        if session.state == "live":
            session.end()
