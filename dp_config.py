#!/usr/bin/env python3
"""Shared configuration loader for the demo preview generator."""

from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional, Union

import yaml

DEFAULT_CONFIG_NAME = "config.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "gif": {
        "frame_delay": 1500,
        "width": 800,
        "quality": None,
        "loops": 0,
    },
    "encoder": {
        "ffmpeg_path": None,
    },
    "output": {
        "html_name": "animated-preview.html",
        "gif_name": "demo.gif",
        "assets_dir": "assets",
        "stage_assets": False,
    },
    "logging": {
        "level": "INFO",
    },
}


def configure_logging(level: Union[str, int] = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )


def _deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def resolve_path(path_value: Union[str, Path], base: Optional[Union[str, Path]] = None) -> str:
    """Resolve a config path relative to `base`, defaulting to the working directory."""
    path = Path(path_value).expanduser()
    if not path.is_absolute():
        path = Path(base if base is not None else Path.cwd()).expanduser() / path
    return str(path)


def load_config(config_path: Optional[Union[str, Path]] = None) -> dict[str, Any]:
    """
    Load `config_path`, or `config.yaml` in the working directory, over the defaults.

    Relative paths inside the file resolve against the file's own directory.
    """
    cfg_path = Path(config_path).expanduser() if config_path else Path.cwd() / DEFAULT_CONFIG_NAME
    cfg = deepcopy(DEFAULT_CONFIG)

    if cfg_path.exists():
        user_cfg = yaml.safe_load(cfg_path.read_text()) or {}
        if not isinstance(user_cfg, dict):
            raise ValueError(f"Config file must contain a mapping: {cfg_path}")
        cfg = _deep_merge(cfg, user_cfg)
        encoder_cfg = cfg.get("encoder")
        if isinstance(encoder_cfg, dict) and encoder_cfg.get("ffmpeg_path"):
            encoder_cfg["ffmpeg_path"] = resolve_path(
                encoder_cfg["ffmpeg_path"], cfg_path.resolve().parent
            )

    return cfg
