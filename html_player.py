#!/usr/bin/env python3
"""
Self-contained HTML slideshow player for demo screenshots.

Used as the fallback artifact when no GIF can be encoded. Frame names and
step descriptions are embedded in the page; images are referenced under an
`assets/` directory next to the HTML file.
"""

from __future__ import annotations

import html
import json
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Sequence
from urllib.parse import quote

if TYPE_CHECKING:
    from demo_session import DemoSession
    from preview_generator import Frame

DEFAULT_ASSETS_DIR = "assets"

_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{TITLE}} - Animated Preview</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      background: #1a1a2e;
      min-height: 100vh;
      display: flex;
      flex-direction: column;
      align-items: center;
      padding: 20px;
    }
    h1 { color: #eee; margin-bottom: 20px; font-size: 24px; }
    .player {
      position: relative;
      background: #000;
      border-radius: 8px;
      overflow: hidden;
      box-shadow: 0 10px 40px rgba(0,0,0,0.5);
    }
    .player img { display: block; max-width: 100%; height: auto; }
    .player .empty { color: #888; padding: 80px 120px; font-size: 16px; }
    .controls { display: flex; gap: 10px; margin-top: 20px; }
    button {
      padding: 10px 20px;
      font-size: 14px;
      border: none;
      border-radius: 6px;
      cursor: pointer;
      background: #4361ee;
      color: white;
      transition: background 0.2s;
    }
    button:hover { background: #3a56d4; }
    button:disabled { background: #666; cursor: not-allowed; }
    .step-indicator { color: #aaa; margin-top: 15px; font-size: 14px; }
    .step-description {
      color: #fff;
      margin-top: 10px;
      font-size: 16px;
      max-width: 600px;
      text-align: center;
    }
  </style>
</head>
<body>
  <h1>{{TITLE}}</h1>
  <div class="player">
    {{STAGE}}
  </div>
  <div class="controls">
    <button id="prev"{{DISABLED}}>&larr; Previous</button>
    <button id="playPause"{{DISABLED}}>&#9208; Pause</button>
    <button id="next"{{DISABLED}}>Next &rarr;</button>
  </div>
  <div class="step-indicator">
    Step <span id="current">{{FIRST_STEP}}</span> of {{TOTAL}}
  </div>
  <div class="step-description" id="description"></div>

  <script>
    const frames = {{FRAMES_JSON}};
    const descriptions = {{DESCRIPTIONS_JSON}};
    const frameDelay = {{FRAME_DELAY}};
    let currentFrame = 0;
    let isPlaying = frames.length > 0;
    let intervalId;

    const img = document.getElementById('frame');
    const currentSpan = document.getElementById('current');
    const descDiv = document.getElementById('description');
    const playPauseBtn = document.getElementById('playPause');
    const prevBtn = document.getElementById('prev');
    const nextBtn = document.getElementById('next');

    function updateFrame() {
      if (!frames.length) return;
      img.src = frames[currentFrame];
      currentSpan.textContent = currentFrame + 1;
      descDiv.textContent = descriptions[currentFrame] || '';
    }

    function nextFrame() {
      if (!frames.length) return;
      currentFrame = (currentFrame + 1) % frames.length;
      updateFrame();
    }

    function prevFrame() {
      if (!frames.length) return;
      currentFrame = (currentFrame - 1 + frames.length) % frames.length;
      updateFrame();
    }

    function togglePlay() {
      if (!frames.length) return;
      isPlaying = !isPlaying;
      playPauseBtn.textContent = isPlaying ? '\\u23F8 Pause' : '\\u25B6 Play';
      if (isPlaying) {
        intervalId = setInterval(nextFrame, frameDelay);
      } else {
        clearInterval(intervalId);
      }
    }

    if (isPlaying) {
      intervalId = setInterval(nextFrame, frameDelay);
    }
    updateFrame();

    playPauseBtn.addEventListener('click', togglePlay);
    prevBtn.addEventListener('click', () => { prevFrame(); });
    nextBtn.addEventListener('click', () => { nextFrame(); });

    document.addEventListener('keydown', (e) => {
      if (e.key === 'ArrowLeft') prevFrame();
      if (e.key === 'ArrowRight') nextFrame();
      if (e.key === ' ') { e.preventDefault(); togglePlay(); }
    });
  </script>
</body>
</html>
"""


_PLACEHOLDER = re.compile(r"\{\{([A-Z_]+)\}\}")


def _script_json(value) -> str:
    # "</" would terminate the inline <script> element.
    return json.dumps(value).replace("</", "<\\/")


def asset_url(assets_dir: str, name: str) -> str:
    """Relative URL for an asset; bytes that are not URL-safe are percent-encoded."""
    return quote(os.fsencode(f"{assets_dir}/{name}"), safe="/")


def frame_sources(frames: Sequence["Frame"], assets_dir: str = DEFAULT_ASSETS_DIR) -> list[str]:
    return [asset_url(assets_dir, frame.asset_name or Path(frame.path).name) for frame in frames]


def render_player(
    session: "DemoSession",
    frames: Sequence["Frame"],
    frame_delay: int,
    assets_dir: str = DEFAULT_ASSETS_DIR,
) -> str:
    """Render the slideshow page for `frames`, in order, `frame_delay` ms apart."""
    sources = frame_sources(frames, assets_dir)
    descriptions = [frame.description for frame in frames]

    if sources:
        stage = f'<img id="frame" src="{html.escape(sources[0])}" alt="Demo frame">'
        disabled = ""
    else:
        stage = '<div id="frame" class="empty">No frames captured</div>'
        disabled = " disabled"

    values = {
        "TITLE": html.escape(session.title),
        "STAGE": stage,
        "DISABLED": disabled,
        "FIRST_STEP": "1" if sources else "0",
        "TOTAL": str(len(sources)),
        "FRAMES_JSON": _script_json(sources),
        "DESCRIPTIONS_JSON": _script_json(descriptions),
        "FRAME_DELAY": str(int(frame_delay)),
    }
    # Single pass so substituted text is never rescanned for placeholders.
    return _PLACEHOLDER.sub(lambda match: values[match.group(1)], _HTML_TEMPLATE)
