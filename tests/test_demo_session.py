from __future__ import annotations

import json

import pytest

from demo_session import DemoSession, load_session


def test_from_dict_reads_recorder_keys():
    session = DemoSession.from_dict(
        {
            "title": "Onboarding",
            "steps": [
                {"description": "Open app", "evidence": {"screenshotPath": "shots/1.png"}},
                {"description": "Wait", "evidence": {}},
                {"description": "Done", "evidence": {"screenshot_path": "/abs/3.png"}},
                {"description": "No evidence"},
            ],
        }
    )

    assert session.title == "Onboarding"
    assert [s.evidence.screenshot_path for s in session.steps] == [
        "shots/1.png",
        None,
        "/abs/3.png",
        None,
    ]


def test_load_session_from_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"title": "T", "steps": [{"description": "x"}]}))

    session = load_session(path)
    assert session.title == "T"
    assert session.steps[0].description == "x"


def test_load_session_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_session(tmp_path / "session.json")


def test_load_session_rejects_non_object(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("[]")
    with pytest.raises(ValueError):
        load_session(path)


@pytest.mark.parametrize(
    "data, message",
    [
        ({"title": "x"}, None),
        ({"title": "x", "steps": None}, "'steps' must be a list"),
        ({"title": "x", "steps": {"a": 1}}, "'steps' must be a list"),
        ({"title": "x", "steps": ["open"]}, r"steps\[1\]: step must be an object"),
        ({"title": "x", "steps": [{"evidence": "x"}]}, "'evidence' must be an object"),
        ({"title": "x", "steps": [{"evidence": {"screenshotPath": 5}}]}, "must be a string"),
    ],
)
def test_from_dict_validates_shape(data, message):
    if message is None:
        assert DemoSession.from_dict(data).steps == []
        return
    with pytest.raises(ValueError, match=message):
        DemoSession.from_dict(data)
