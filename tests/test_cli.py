import json

import pytest
from PIL import Image

from annodeck import __version__
from annodeck.cli import main


@pytest.fixture
def log_args(tmp_path):
    return ["--log-dir", str(tmp_path / "logs")]


def test_list_prints_slides(log_args, capsys):
    assert main(log_args + ["list"]) == 0
    out = capsys.readouterr().out
    assert "intro" in out
    assert "* text" in out


def test_datasets(log_args, capsys):
    assert main(log_args + ["datasets"]) == 0
    out = capsys.readouterr().out
    for name in ("climate", "geyser", "heights", "mtcars"):
        assert name in out
    assert "32 rows" in out


def test_export_then_render_one_slide(tmp_path, log_args, capsys):
    deck_path = tmp_path / "deck.json"
    assert main(log_args + ["export-deck", str(deck_path)]) == 0
    assert deck_path.exists()

    out_dir = tmp_path / "site"
    code = main(
        log_args
        + ["render", "--deck", str(deck_path), "--out", str(out_dir), "--only", "text", "--format", "md", "--dpi", "50"]
    )
    assert code == 0
    assert (out_dir / "figures" / "text.png").stat().st_size > 0
    assert (out_dir / "slides.md").exists()
    assert not (out_dir / "slides.html").exists()
    assert (tmp_path / "logs" / "annodeck.log").exists()


def test_unknown_slide_returns_error(tmp_path, log_args):
    assert main(log_args + ["render", "--out", str(tmp_path), "--only", "nope"]) == 1


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_render_keeps_the_deck_dpi(tmp_path, log_args):
    deck_path = tmp_path / "deck.json"
    assert main(log_args + ["export-deck", str(deck_path)]) == 0
    raw = json.loads(deck_path.read_text(encoding="utf-8"))
    for slide in raw["slides"]:
        if slide["slide_id"] == "text":
            slide["figure"]["page"]["dpi"] = 40
    deck_path.write_text(json.dumps(raw), encoding="utf-8")

    out_dir = tmp_path / "site"
    code = main(log_args + ["render", "--deck", str(deck_path), "--out", str(out_dir), "--only", "text", "--format", "md"])
    assert code == 0
    # 10in slide at 40 dpi
    with Image.open(out_dir / "figures" / "text.png") as image:
        assert image.size[0] < 600
