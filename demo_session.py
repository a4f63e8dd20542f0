#!/usr/bin/env python3
"""
Read-only model of a recorded demo session.

The recorder writes a `session.json` next to its screenshots; this module
only reads it. Keys may be camelCase (as the recorder emits them) or
snake_case.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Evidence:
    screenshot_path: Optional[str] = None


@dataclass(frozen=True)
class Step:
    description: str
    evidence: Evidence = field(default_factory=Evidence)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Step":
        if not isinstance(data, dict):
            raise ValueError(f"step must be an object, got {type(data).__name__}")
        evidence = data.get("evidence") or {}
        if not isinstance(evidence, dict):
            raise ValueError(f"'evidence' must be an object, got {type(evidence).__name__}")
        screenshot = evidence.get("screenshotPath", evidence.get("screenshot_path"))
        if screenshot is not None and not isinstance(screenshot, str):
            raise ValueError(f"'screenshotPath' must be a string, got {type(screenshot).__name__}")
        return cls(
            description=str(data.get("description") or ""),
            evidence=Evidence(screenshot_path=screenshot or None),
        )


@dataclass(frozen=True)
class DemoSession:
    title: str
    steps: list[Step] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DemoSession":
        steps = data.get("steps", [])
        if not isinstance(steps, list):
            raise ValueError(f"'steps' must be a list, got {type(steps).__name__}")

        parsed = []
        for index, step in enumerate(steps, start=1):
            try:
                parsed.append(Step.from_dict(step))
            except ValueError as exc:
                raise ValueError(f"steps[{index}]: {exc}") from exc
        return cls(title=str(data.get("title") or "Demo"), steps=parsed)


def load_session(path: Union[str, Path]) -> DemoSession:
    session_path = Path(path).expanduser()
    if not session_path.exists():
        raise FileNotFoundError(f"Session file not found: {session_path}")

    with session_path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Session file must contain a JSON object: {session_path}")
    return DemoSession.from_dict(data)
