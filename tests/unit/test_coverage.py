from live_session.catalog import MEDDPICC
from live_session.coverage import compute, field_status
from live_session.models import Extraction, Framework


def _ex(field: str, confidence: float) -> Extraction:
    return Extraction(field=field, value=f"{field} evidence", confidence=confidence)


def test_reference_example(framework):
    snapshot = {"metrics": _ex("metrics", 0.9), "economic_buyer": _ex("economic_buyer", 0.6)}
    result = compute(framework, snapshot)

    assert result.percentage == 67
    assert [f.key for f in result.per_field] == ["metrics", "economic_buyer", "champion"]
    assert [f.status for f in result.per_field] == ["complete", "partial", "missing"]
    assert result.missing() == ["champion"]


def test_empty_framework_is_zero_percent():
    empty = Framework(id="none", name="None")
    assert compute(empty, {"metrics": _ex("metrics", 1.0)}).percentage == 0


def test_threshold_edges(framework):
    snapshot = {
        "metrics": _ex("metrics", 0.7),
        "economic_buyer": _ex("economic_buyer", 0.5),
        "champion": _ex("champion", 0.71),
    }
    result = compute(framework, snapshot)

    # 0.5 is not covered, 0.7 is covered but only partial
    assert result.percentage == 67
    assert [f.status for f in result.per_field] == ["partial", "partial", "complete"]


def test_zero_confidence_counts_as_missing():
    assert field_status(None) == "missing"
    assert field_status(_ex("metrics", 0.0)) == "missing"
    assert field_status(_ex("metrics", 0.01)) == "partial"


def test_unknown_keys_ignored_and_half_rounds_up():
    snapshot = {"metrics": _ex("metrics", 0.8), "pain": _ex("pain", 0.9)}
    result = compute(MEDDPICC, snapshot)

    # 1 of 8 fields = 12.5%, rounded half up
    assert result.percentage == 13
    assert "pain" not in [f.key for f in result.per_field]


def test_missing_required_follows_framework_order():
    result = compute(MEDDPICC, {"metrics": _ex("metrics", 0.9)})
    assert result.missing_required() == [
        "economic_buyer",
        "decision_criteria",
        "decision_process",
        "identify_pain",
        "champion",
    ]


def test_partial_field_still_counts_toward_percentage(framework):
    result = compute(framework, {"economic_buyer": _ex("economic_buyer", 0.6)})

    # above 0.5 counts as covered even though the status is only partial
    assert result.percentage == 33
    assert result.per_field[1].status == "partial"
