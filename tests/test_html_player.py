from __future__ import annotations

import json
import os
import re
from pathlib import Path

from demo_session import DemoSession
from html_player import render_player
from preview_generator import Frame


def _embedded(page: str, name: str):
    match = re.search(rf"const {name} = (.*);\n", page)
    assert match, f"{name} not embedded"
    return json.loads(match.group(1))


def _frames(*names):
    return [Frame(path=Path("/runs/demo") / name, description=f"About {name}") for name in names]


def test_embeds_frames_and_descriptions_in_order():
    page = render_player(DemoSession(title="Signup"), _frames("a.png", "b.png", "c.png"), 1500)

    assert _embedded(page, "frames") == ["assets/a.png", "assets/b.png", "assets/c.png"]
    assert _embedded(page, "descriptions") == ["About a.png", "About b.png", "About c.png"]
    assert "const frameDelay = 1500;" in page
    assert 'src="assets/a.png"' in page
    assert "of 3" in page


def test_title_used_for_page_title_and_heading():
    page = render_player(DemoSession(title="Billing <beta>"), _frames("a.png"), 500)

    assert "<title>Billing &lt;beta&gt; - Animated Preview</title>" in page
    assert "<h1>Billing &lt;beta&gt;</h1>" in page


def test_has_playback_controls_and_keyboard_bindings():
    page = render_player(DemoSession(title="t"), _frames("a.png"), 500)

    for element_id in ('id="prev"', 'id="playPause"', 'id="next"'):
        assert element_id in page
    assert "ArrowLeft" in page and "ArrowRight" in page
    assert "setInterval(nextFrame, frameDelay)" in page
    assert "% frames.length" in page


def test_description_cannot_close_script_element():
    frames = [Frame(path=Path("/x/a.png"), description="</script><b>hi</b>")]
    page = render_player(DemoSession(title="t"), frames, 500)

    assert page.count("</script>") == 1
    assert _embedded(page, "descriptions") == ["</script><b>hi</b>"]


def test_placeholder_text_in_title_is_not_expanded():
    page = render_player(DemoSession(title="{{TOTAL}}"), _frames("a.png"), 500)
    assert "<h1>{{TOTAL}}</h1>" in page


def test_empty_frames_render_placeholder():
    page = render_player(DemoSession(title="Nothing"), [], 1500)

    assert "<img" not in page
    assert "No frames captured" in page
    assert _embedded(page, "frames") == []
    assert page.rstrip().endswith("</html>")


def test_custom_assets_dir():
    page = render_player(DemoSession(title="t"), _frames("a.png"), 500, assets_dir="shots")
    assert _embedded(page, "frames") == ["shots/a.png"]


def test_asset_names_are_url_encoded():
    frames = [
        Frame(path=Path("/runs") / "step #1 50%?.png", description="odd"),
        Frame(path=Path("/runs") / os.fsdecode(b"shot\xff.png"), description="bytes"),
    ]
    page = render_player(DemoSession(title="t"), frames, 500)

    assert _embedded(page, "frames") == [
        "assets/step%20%231%2050%25%3F.png",
        "assets/shot%FF.png",
    ]
    assert 'src="assets/step%20%231%2050%25%3F.png"' in page
    page.encode("utf-8")


def test_staged_asset_name_overrides_basename():
    frames = [Frame(path=Path("/a/1.png"), description="x", asset_name="002-1.png")]
    page = render_player(DemoSession(title="t"), frames, 500)
    assert _embedded(page, "frames") == ["assets/002-1.png"]
