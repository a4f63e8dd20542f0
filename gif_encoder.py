#!/usr/bin/env python3
"""
Two-pass palette GIF encoding through a bundled ffmpeg binary.

Pass 1 builds a palette from every frame, pass 2 applies it while encoding.
Frames are fed through an ffmpeg concat manifest so each screenshot is
held for the configured frame delay.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional, Sequence

log = logging.getLogger("DemoPreview")

MANIFEST_NAME = "frames.txt"
PALETTE_NAME = "palette.png"
DEFAULT_GIF_NAME = "demo.gif"

QUALITY_MIN = 1
QUALITY_MAX = 20
MAX_COLORS = 256
MIN_COLORS = 32

Locator = Callable[[], Optional[str]]
Runner = Callable[[Sequence[str]], subprocess.CompletedProcess]


class PreviewError(RuntimeError):
    """Base class for preview generation failures."""


class EncoderUnavailable(PreviewError):
    """The ffmpeg binary could not be located."""


class EncoderExecutionFailure(PreviewError):
    """ffmpeg could not be started or exited with a nonzero status."""


@dataclass(frozen=True)
class GifOptions:
    frame_delay: int = 1500
    width: int = 800
    quality: Optional[int] = None
    loops: int = 0

    def __post_init__(self) -> None:
        if self.frame_delay <= 0:
            raise ValueError(f"frame_delay must be positive, got {self.frame_delay}")
        if self.width <= 0:
            raise ValueError(f"width must be positive, got {self.width}")
        if self.loops < 0:
            raise ValueError(f"loops must be >= 0, got {self.loops}")

    @classmethod
    def from_config(cls, cfg: dict) -> "GifOptions":
        gif_cfg = cfg.get("gif", {})
        quality = gif_cfg.get("quality")
        return cls(
            frame_delay=int(gif_cfg.get("frame_delay", 1500)),
            width=int(gif_cfg.get("width", 800)),
            quality=int(quality) if quality is not None else None,
            loops=int(gif_cfg.get("loops", 0)),
        )

    def merged(self, **overrides) -> "GifOptions":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def format_fps(frame_delay: int) -> str:
    return f"{1000 / frame_delay:.2f}"


def quality_to_colors(quality: int) -> int:
    """Map quality 1..20 (lower is better) to a palette size of 256..32 colors."""
    quality = max(QUALITY_MIN, min(QUALITY_MAX, int(quality)))
    span = (MAX_COLORS - MIN_COLORS) / (QUALITY_MAX - QUALITY_MIN)
    return int(round(MAX_COLORS - (quality - QUALITY_MIN) * span))


def format_duration(frame_delay: int) -> str:
    """Seconds per frame without float rounding or trailing zeros."""
    seconds = (Decimal(str(frame_delay)) / 1000).normalize()
    return format(seconds, "f")


def build_manifest(screenshots: Sequence[Path], frame_delay: int) -> str:
    duration = format_duration(frame_delay)
    entries = []
    for shot in screenshots:
        # concat syntax: a quote inside a quoted path is written as '\''
        posix = str(shot).replace("\\", "/").replace("'", "'\\''")
        entries.append(f"file '{posix}'\nduration {duration}")
    return "\n".join(entries)


def _scale_filter(options: GifOptions) -> str:
    return f"fps={format_fps(options.frame_delay)},scale={options.width}:-1:flags=lanczos"


def palette_command(
    ffmpeg: str, manifest_path: Path, palette_path: Path, options: GifOptions
) -> list[str]:
    palettegen = "palettegen"
    if options.quality is not None:
        palettegen = f"palettegen=max_colors={quality_to_colors(options.quality)}"
    return [
        ffmpeg,
        "-f", "concat",
        "-safe", "0",
        "-i", str(manifest_path),
        "-vf", f"{_scale_filter(options)},{palettegen}",
        "-y",
        str(palette_path),
    ]


def encode_command(
    ffmpeg: str,
    manifest_path: Path,
    palette_path: Path,
    gif_path: Path,
    options: GifOptions,
) -> list[str]:
    return [
        ffmpeg,
        "-f", "concat",
        "-safe", "0",
        "-i", str(manifest_path),
        "-i", str(palette_path),
        "-lavfi", f"{_scale_filter(options)}[x];[x][1:v]paletteuse",
        "-loop", str(options.loops),
        "-y",
        str(gif_path),
    ]


def locate_ffmpeg(explicit: Optional[str] = None) -> Optional[str]:
    """Return the configured ffmpeg, else the one bundled with imageio-ffmpeg."""
    if explicit:
        return explicit if Path(explicit).expanduser().exists() else None

    import imageio_ffmpeg

    try:
        return imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError as exc:
        log.debug("Bundled ffmpeg unavailable: %s", exc)
        return None


def run_process(cmd: Sequence[str]) -> subprocess.CompletedProcess:
    return subprocess.run(list(cmd), capture_output=True, text=True, errors="replace", check=False)


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        log.debug("Could not remove %s: %s", path, exc)


class GifEncoder:
    """Runs the palette and encode passes with injectable collaborators."""

    def __init__(
        self,
        locator: Optional[Locator] = None,
        runner: Optional[Runner] = None,
        gif_name: str = DEFAULT_GIF_NAME,
    ):
        self.locator = locator or locate_ffmpeg
        self.runner = runner or run_process
        self.gif_name = gif_name

    def _run(self, cmd: list[str], stage: str) -> None:
        log.debug("ffmpeg %s: %s", stage, " ".join(cmd))
        try:
            result = self.runner(cmd)
        except Exception as exc:
            raise EncoderExecutionFailure(f"ffmpeg {stage} could not run: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            stderr = stderr.strip()
            tail = stderr.splitlines()[-1] if stderr else "no output"
            raise EncoderExecutionFailure(
                f"ffmpeg {stage} exited with status {result.returncode}: {tail}"
            )

    def encode(
        self, screenshots: Sequence[Path], output_dir: Path, options: GifOptions
    ) -> Path:
        """
        Encode `screenshots` into `<output_dir>/demo.gif`.

        Returns:
            Path to the written GIF.
        """
        ffmpeg = self.locator()
        if not ffmpeg:
            raise EncoderUnavailable("ffmpeg binary not found")

        output_dir = Path(output_dir)
        gif_path = output_dir / self.gif_name
        manifest_path = output_dir / MANIFEST_NAME
        palette_path = output_dir / PALETTE_NAME

        manifest_path.write_text(
            build_manifest(screenshots, options.frame_delay),
            encoding="utf-8",
            errors="surrogateescape",
        )

        try:
            self._run(palette_command(ffmpeg, manifest_path, palette_path, options), "palette")
            self._run(
                encode_command(ffmpeg, manifest_path, palette_path, gif_path, options),
                "encode",
            )
        except Exception:
            _unlink_quietly(manifest_path)
            raise

        _unlink_quietly(manifest_path)
        _unlink_quietly(palette_path)
        return gif_path
