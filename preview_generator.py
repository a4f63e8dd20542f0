#!/usr/bin/env python3
"""
Preview generation for recorded demo sessions.

Collects the screenshots a session references, always writes the HTML
slideshow player, then tries to encode `demo.gif`. The GIF path is returned
when encoding succeeds, otherwise the HTML path.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Union

from demo_session import DemoSession
from dp_config import resolve_path
from gif_encoder import DEFAULT_GIF_NAME, GifEncoder, GifOptions, locate_ffmpeg
from html_player import DEFAULT_ASSETS_DIR, render_player

log = logging.getLogger("DemoPreview")

DEFAULT_HTML_NAME = "animated-preview.html"

OptionsArg = Optional[Union[GifOptions, dict]]


@dataclass(frozen=True)
class Frame:
    path: Path
    description: str
    # Name under the assets directory; empty means the screenshot's own name.
    asset_name: str = ""


def _resolve_screenshot(screenshot_path: str, output_dir: Path) -> Path:
    path = Path(screenshot_path)
    if path.is_absolute():
        return path
    return output_dir / path


def collect_frames(session: DemoSession, output_dir: Union[str, Path]) -> list[Frame]:
    """Return one frame per step whose screenshot exists, in step order."""
    base = Path(output_dir).expanduser().absolute()
    frames: list[Frame] = []
    for index, step in enumerate(session.steps, start=1):
        screenshot = step.evidence.screenshot_path
        if not screenshot:
            continue
        full_path = _resolve_screenshot(screenshot, base)
        if not os.access(full_path, os.R_OK):
            log.debug("Step %d: screenshot %s not accessible, skipping", index, full_path)
            continue
        frames.append(Frame(path=full_path, description=step.description))
    return frames


def collect_screenshots(session: DemoSession, output_dir: Union[str, Path]) -> list[Path]:
    return [frame.path for frame in collect_frames(session, output_dir)]


class PreviewGenerator:
    """Writes the HTML player and, when ffmpeg cooperates, an animated GIF."""

    def __init__(
        self,
        encoder: Optional[GifEncoder] = None,
        defaults: Optional[GifOptions] = None,
        html_name: str = DEFAULT_HTML_NAME,
        assets_dir: str = DEFAULT_ASSETS_DIR,
        stage_assets: bool = False,
    ):
        self.encoder = encoder or GifEncoder()
        self.defaults = defaults or GifOptions()
        self.html_name = html_name
        self.assets_dir = assets_dir
        self.stage_assets = stage_assets

    @classmethod
    def from_config(cls, cfg: dict) -> "PreviewGenerator":
        encoder_cfg = cfg.get("encoder", {})
        output_cfg = cfg.get("output", {})
        explicit = encoder_cfg.get("ffmpeg_path")
        if explicit:
            explicit = resolve_path(explicit)
        encoder = GifEncoder(
            locator=lambda: locate_ffmpeg(explicit),
            gif_name=output_cfg.get("gif_name", DEFAULT_GIF_NAME),
        )
        return cls(
            encoder=encoder,
            defaults=GifOptions.from_config(cfg),
            html_name=output_cfg.get("html_name", DEFAULT_HTML_NAME),
            assets_dir=output_cfg.get("assets_dir", DEFAULT_ASSETS_DIR),
            stage_assets=bool(output_cfg.get("stage_assets", False)),
        )

    def resolve_options(self, options: OptionsArg = None) -> GifOptions:
        if options is None:
            return self.defaults
        if isinstance(options, GifOptions):
            return options
        return self.defaults.merged(**options)

    def _stage_assets(self, frames: list[Frame], output_dir: Path) -> list[Frame]:
        """Copy screenshots under the assets directory, renaming clashing basenames."""
        assets = output_dir / self.assets_dir
        assets.mkdir(parents=True, exist_ok=True)
        owners: dict[str, Path] = {}
        staged: list[Frame] = []
        for index, frame in enumerate(frames, start=1):
            name = frame.path.name
            counter = index
            while name in owners and owners[name] != frame.path:
                name = f"{counter:03d}-{frame.path.name}"
                counter += 1
            if name != frame.path.name:
                log.warning(
                    "Screenshot %s shares its name with another frame, staged as %s",
                    frame.path,
                    name,
                )
            owners[name] = frame.path

            destination = assets / name
            if not (destination.exists() and os.path.samefile(destination, frame.path)):
                shutil.copy2(str(frame.path), str(destination))
            staged.append(replace(frame, asset_name=name))
        log.info("Staged %d screenshot(s) into %s", len(frames), assets)
        return staged

    @staticmethod
    def _warn_name_clashes(frames: list[Frame]) -> None:
        seen: dict[str, Path] = {}
        for frame in frames:
            other = seen.setdefault(frame.path.name, frame.path)
            if other != frame.path:
                log.warning(
                    "Screenshots %s and %s share a name; the player will show one of them twice",
                    other,
                    frame.path,
                )

    def generate(
        self,
        session: DemoSession,
        output_dir: Union[str, Path],
        options: OptionsArg = None,
    ) -> Optional[Path]:
        """
        Produce a preview for `session` inside `output_dir`.

        Returns:
            Path to `demo.gif`, or to the HTML player when GIF encoding fails,
            or None when no step has an accessible screenshot.
        """
        opts = self.resolve_options(options)
        out_dir = Path(output_dir).expanduser().absolute()

        frames = collect_frames(session, out_dir)
        if not frames:
            log.warning("No screenshots available for GIF generation")
            return None

        if self.stage_assets:
            frames = self._stage_assets(frames, out_dir)
        else:
            self._warn_name_clashes(frames)

        html_path = out_dir / self.html_name
        page = render_player(session, frames, opts.frame_delay, assets_dir=self.assets_dir)
        html_path.write_text(page, encoding="utf-8", errors="xmlcharrefreplace")

        try:
            gif_path = self.encoder.encode([frame.path for frame in frames], out_dir, opts)
            log.info("Animated GIF generated: %s", gif_path)
            return gif_path
        except Exception as exc:
            log.warning("GIF generation failed: %s", exc)

        log.info("HTML preview generated: %s", html_path)
        return html_path


def generate(
    session: DemoSession,
    output_dir: Union[str, Path],
    options: OptionsArg = None,
) -> Optional[Path]:
    return PreviewGenerator().generate(session, output_dir, options)
