import json

import pytest
from pydantic import ValidationError

from live_session.catalog import BANT, MEDDPICC, StaticFrameworkCatalog, load_catalog
from live_session.models import Framework, FrameworkField


def test_builtin_frameworks():
    catalog = StaticFrameworkCatalog()
    assert [f.id for f in catalog.list()] == ["meddpicc", "bant"]
    assert catalog.get("meddpicc") is MEDDPICC
    assert MEDDPICC.keys()[:2] == ["metrics", "economic_buyer"]
    assert MEDDPICC.get_field("paper_process").required is False
    assert len(BANT.fields) == 4


def test_unknown_framework_raises_key_error():
    with pytest.raises(KeyError):
        StaticFrameworkCatalog().get("spiced")


def test_duplicate_ids_and_keys_rejected():
    with pytest.raises(ValueError):
        StaticFrameworkCatalog([BANT, BANT])
    with pytest.raises(ValidationError):
        Framework(
            id="dup",
            name="Dup",
            fields=[FrameworkField(key="a", label="A"), FrameworkField(key="a", label="A again")],
        )


def test_load_catalog_from_json(tmp_path):
    payload = {
        "frameworks": [
            {
                "id": "spiced",
                "name": "SPICED",
                "fields": [
                    {"key": "situation", "label": "Situation"},
                    {"key": "pain", "label": "Pain", "questions": ["What hurts today?"]},
                    {"key": "impact", "label": "Impact", "required": False},
                ],
            }
        ]
    }
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(payload))

    catalog = load_catalog(path)
    spiced = catalog.get("spiced")
    assert spiced.keys() == ["situation", "pain", "impact"]
    assert spiced.get_field("pain").questions == ["What hurts today?"]
    assert spiced.get_field("impact").required is False
