import base64

import pytest
from PIL import Image

from annodeck.composer.specs import DataSpec, FigureSpec, LayerSpec
from annodeck.deck import Deck, Slide, build_default_deck, load_deck, render_deck, save_deck
from annodeck.deck.model import deck_from_dict, deck_to_dict
from annodeck.errors import SpecError

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def _small_deck() -> Deck:
    figure = FigureSpec(data=DataSpec("mtcars"), layers=[LayerSpec("point", x="wt", y="mpg")])
    figure.page.dpi = 60.0
    return Deck(
        title="Cars & more",
        author="Someone",
        slides=[
            Slide("welcome", "Welcome", body="First paragraph.\n\nSecond <paragraph>."),
            Slide("cars", "Cars", figure=figure, notes="Mention the outliers."),
            Slide("quiet", "No source", figure=FigureSpec(data=DataSpec("mtcars"), layers=[LayerSpec("point", x="wt", y="mpg")]), show_source=False),
        ],
    )


def test_default_deck_ids_are_unique_and_ordered():
    deck = build_default_deck()
    ids = [s.slide_id for s in deck.slides]
    assert ids[0] == "intro"
    assert len(ids) == len(set(ids))
    for expected in ("text", "label", "rect", "repel-text", "group-means", "mark-ellipse", "mark-hull", "smooth-lm"):
        assert expected in ids
    assert deck.get("text").figure is not None
    with pytest.raises(KeyError):
        deck.get("missing")


def test_full_default_deck_renders(tmp_path):
    deck = build_default_deck()
    result = render_deck(deck, tmp_path, dpi=50)

    charted = [s.slide_id for s in deck.slides if s.figure is not None]
    assert [p.stem for p in result.images] == charted
    for image in result.images:
        assert image.read_bytes()[:8] == PNG_MAGIC

    md = (tmp_path / "slides.md").read_text(encoding="utf-8")
    assert md.startswith("# Annotating charts")
    assert md.count("\n---\n") == len(deck.slides)
    assert "![Text at a fixed position](figures/text.png)" in md

    page = (tmp_path / "slides.html").read_text(encoding="utf-8")
    assert page.count("<section") == len(deck.slides) + 1
    assert 'src="figures/mark-ellipse.png"' in page


def test_markdown_and_html_content(tmp_path):
    result = render_deck(_small_deck(), tmp_path)
    assert [d.name for d in result.documents] == ["slides.md", "slides.html"]
    assert [a.image_path for a in result.slides][0] is None

    md = (tmp_path / "slides.md").read_text(encoding="utf-8")
    assert "```json" in md
    assert md.count("```json") == 1
    assert "Note:\nMention the outliers." in md

    page = (tmp_path / "slides.html").read_text(encoding="utf-8")
    assert "<title>Cars &amp; more</title>" in page
    assert "<p>Second &lt;paragraph&gt;.</p>" in page
    assert '<aside class="notes">Mention the outliers.</aside>' in page
    assert page.count("<details>") == 1


def test_only_and_embedded_images(tmp_path):
    result = render_deck(build_default_deck(), tmp_path, formats=["html"], only=["text"], embed_images=True, dpi=50)
    assert [p.name for p in result.images] == ["text.png"]
    assert not (tmp_path / "slides.md").exists()

    page = (tmp_path / "slides.html").read_text(encoding="utf-8")
    assert 'id="text"' in page
    assert 'id="label"' not in page
    marker = "data:image/png;base64,"
    start = page.index(marker) + len(marker)
    encoded = page[start:page.index('"', start)]
    assert base64.b64decode(encoded) == (tmp_path / "figures" / "text.png").read_bytes()


def test_render_deck_rejects_bad_requests(tmp_path):
    deck = _small_deck()
    with pytest.raises(SpecError):
        render_deck(deck, tmp_path, only=["nope"])
    with pytest.raises(SpecError):
        render_deck(deck, tmp_path, formats=["pdf"])

    deck.slides.append(Slide("cars", "Again"))
    with pytest.raises(SpecError):
        render_deck(deck, tmp_path)


def test_overrides_leave_the_deck_untouched(tmp_path):
    deck = build_default_deck()
    authored = deck_to_dict(deck)
    result = render_deck(deck, tmp_path, formats=["md"], only=["text"], dpi=30, template_id="handout")

    # handout pages are 7in wide
    with Image.open(result.images[0]) as image:
        assert image.size[0] < 7 * 30 + 40
    assert deck_to_dict(deck) == authored
    assert deck.get("text").figure.page.dpi == pytest.approx(150.0)
    assert deck.get("text").figure.template_id == "slide"
    assert '"template_id": "slide"' in (tmp_path / "slides.md").read_text(encoding="utf-8")


def test_deck_json_round_trip(tmp_path):
    deck = build_default_deck()
    path = tmp_path / "deck.json"
    save_deck(path, deck)
    loaded = load_deck(path)
    assert [s.slide_id for s in loaded.slides] == [s.slide_id for s in deck.slides]
    assert loaded.get("mark-hull").figure == deck.get("mark-hull").figure


def test_deck_from_dict_validates():
    data = deck_to_dict(_small_deck())
    data["slides"][1]["slide_id"] = "welcome"
    with pytest.raises(SpecError):
        deck_from_dict(data)
    data["slides"][1].pop("slide_id")
    with pytest.raises(SpecError):
        deck_from_dict(data)
