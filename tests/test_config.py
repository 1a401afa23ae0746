import json

from annodeck.core.config import DEFAULTS, load_config


def test_defaults_are_copied():
    config = load_config(environ={})
    assert config == DEFAULTS
    config["formats"].append("pdf")
    assert DEFAULTS["formats"] == ["html", "md"]


def test_file_overrides_and_unknown_keys(tmp_path, caplog):
    path = tmp_path / "annodeck.json"
    path.write_text(json.dumps({"dpi": 72, "output_dir": "out", "colour": "red"}), encoding="utf-8")
    config = load_config(path, environ={})
    assert config["dpi"] == 72
    assert config["output_dir"] == "out"
    assert "colour" not in config
    assert "colour" in caplog.text


def test_environment_wins_over_file(tmp_path):
    path = tmp_path / "annodeck.json"
    path.write_text(json.dumps({"dpi": 72}), encoding="utf-8")
    environ = {
        "ANNODECK_DPI": "200",
        "ANNODECK_FORMATS": "md, html",
        "ANNODECK_EMBED_IMAGES": "yes",
        "ANNODECK_TEMPLATE_ID": "handout",
        "UNRELATED": "1",
    }
    config = load_config(path, environ=environ)
    assert config["dpi"] == 200.0
    assert config["formats"] == ["md", "html"]
    assert config["embed_images"] is True
    assert config["template_id"] == "handout"


def test_dpi_defaults_to_the_slide_setting():
    assert load_config(environ={})["dpi"] is None
    assert load_config(environ={"ANNODECK_DPI": "96"})["dpi"] == 96.0
