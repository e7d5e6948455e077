import pytest
from pydantic import ValidationError

from config.settings import Settings
from live_session.controller import LiveSessionConfig


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.FIRST_SUGGESTION_SECONDS == 15.0
    assert (settings.SUGGESTION_MIN_SECONDS, settings.SUGGESTION_MAX_SECONDS) == (60.0, 90.0)
    assert settings.MONOLOGUE_SEGMENT_THRESHOLD == 10
    assert settings.MERGE_POLICY == "last_write_wins"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SUGGESTION_MIN_SECONDS", "5")
    monkeypatch.setenv("SUGGESTION_MAX_SECONDS", "8")
    monkeypatch.setenv("MERGE_POLICY", "highest_confidence")
    settings = Settings(_env_file=None)

    config = LiveSessionConfig.from_settings(settings)
    assert config.suggestion_min_seconds == 5.0
    assert config.suggestion_max_seconds == 8.0
    assert config.merge_policy == "highest_confidence"


def test_inverted_ranges_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, SUGGESTION_MIN_SECONDS=100, SUGGESTION_MAX_SECONDS=90)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, MOCK_SEGMENT_MIN_SECONDS=9, MOCK_SEGMENT_MAX_SECONDS=7)


def test_unknown_merge_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, MERGE_POLICY="bogus")
    with pytest.raises(ValidationError):
        LiveSessionConfig(merge_policy="bogus")
