# AnnoDeck
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Render a deck: one PNG per slide chart, then Markdown and HTML documents."""

from __future__ import annotations

import base64
import copy
import html
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from annodeck.composer.renderer import export_figure
from annodeck.composer.spec_serialization import figure_spec_to_dict
from annodeck.composer.templates import apply_template_preset
from annodeck.errors import SpecError

from .model import Deck, Slide

log = logging.getLogger(__name__)

__all__ = ["SlideArtifact", "DeckRenderResult", "render_deck", "FORMATS"]

FORMATS = ("html", "md")
FIGURE_DIR = "figures"


@dataclass
class SlideArtifact:
    slide_id: str
    image_path: Optional[Path]
    image_bytes: int = 0


@dataclass
class DeckRenderResult:
    out_dir: Path
    slides: List[SlideArtifact] = field(default_factory=list)
    documents: List[Path] = field(default_factory=list)
    elapsed_s: float = 0.0

    @property
    def images(self) -> List[Path]:
        return [s.image_path for s in self.slides if s.image_path is not None]


def render_deck(
    deck: Deck,
    out_dir: str | Path,
    formats: Sequence[str] = FORMATS,
    only: Iterable[str] | None = None,
    embed_images: bool = False,
    dpi: float | None = None,
    template_id: str | None = None,
) -> DeckRenderResult:
    """
    Render ``deck`` into ``out_dir``.

    Slides render top to bottom. ``only`` restricts rendering to the given slide
    ids (documents then contain just those slides). ``dpi`` and ``template_id``
    override every slide's page settings.
    """
    deck.validate()
    unknown_formats = [f for f in formats if f not in FORMATS]
    if unknown_formats:
        raise SpecError(f"Unknown output format(s): {', '.join(unknown_formats)}")

    slides = deck.slides
    if only:
        wanted = set(only)
        missing = wanted - {s.slide_id for s in slides}
        if missing:
            raise SpecError(f"Unknown slide id(s): {', '.join(sorted(missing))}")
        slides = [s for s in slides if s.slide_id in wanted]

    out_dir = Path(out_dir)
    figure_dir = out_dir / FIGURE_DIR
    figure_dir.mkdir(parents=True, exist_ok=True)
    result = DeckRenderResult(out_dir=out_dir)
    started = time.perf_counter()

    for index, slide in enumerate(slides, start=1):
        log.info("[%d/%d] %s", index, len(slides), slide.slide_id)
        result.slides.append(_render_slide(slide, figure_dir, dpi=dpi, template_id=template_id))

    if "md" in formats:
        result.documents.append(_write_markdown(deck, slides, out_dir))
    if "html" in formats:
        result.documents.append(_write_html(deck, slides, result.slides, out_dir, embed_images))

    result.elapsed_s = time.perf_counter() - started
    log.info("Rendered %d slides in %.1fs -> %s", len(slides), result.elapsed_s, out_dir)
    return result


def _render_slide(slide: Slide, figure_dir: Path, *, dpi: float | None, template_id: str | None) -> SlideArtifact:
    if slide.figure is None:
        return SlideArtifact(slide.slide_id, None)
    # Overrides apply to a copy; the deck keeps its authored figures.
    spec = copy.deepcopy(slide.figure)
    if template_id:
        apply_template_preset(spec, template_id, respect_overrides=False)
    if dpi:
        spec.page.dpi = float(dpi)
    out_path = figure_dir / f"{slide.slide_id}.png"
    try:
        export_figure(spec, out_path)
    except Exception:
        log.error("Slide %s failed to render", slide.slide_id, exc_info=True)
        raise
    return SlideArtifact(slide.slide_id, out_path, out_path.stat().st_size)


def _figure_source(slide: Slide) -> str:
    data = figure_spec_to_dict(slide.figure)
    data.pop("page", None)
    return json.dumps(data, indent=2)


# ---------------------------------------------------------------------- markdown
def _write_markdown(deck: Deck, slides: Sequence[Slide], out_dir: Path) -> Path:
    parts: list[str] = []
    header = [f"# {deck.title}"]
    if deck.subtitle:
        header.append(f"_{deck.subtitle}_")
    if deck.author:
        header.append(deck.author)
    parts.append("\n\n".join(header))

    for slide in slides:
        lines = [f"## {slide.title}"]
        if slide.body:
            lines.append(slide.body)
        if slide.figure is not None:
            lines.append(f"![{slide.title}]({FIGURE_DIR}/{slide.slide_id}.png)")
            if slide.show_source:
                lines.append("```json\n" + _figure_source(slide) + "\n```")
        if slide.notes:
            lines.append("Note:\n" + slide.notes)
        parts.append("\n\n".join(lines))

    path = out_dir / "slides.md"
    path.write_text("\n\n---\n\n".join(parts) + "\n", encoding="utf-8")
    log.info("Wrote %s", path)
    return path


# ---------------------------------------------------------------------- html
_HTML_STYLE = """
body { margin: 0; font-family: "Helvetica Neue", Arial, sans-serif; color: #222; background: #f4f4f4; }
main { scroll-snap-type: y mandatory; height: 100vh; overflow-y: scroll; }
section { scroll-snap-align: start; min-height: 100vh; box-sizing: border-box; padding: 3vh 6vw;
          background: #fff; border-bottom: 1px solid #ddd; }
section h1 { font-size: 2.6em; margin-top: 25vh; }
section h2 { font-size: 1.8em; margin: 0 0 0.4em 0; }
section img { display: block; max-width: 100%; max-height: 70vh; margin: 1em auto; }
details pre { background: #f7f7f7; padding: 0.8em; font-size: 0.8em; overflow-x: auto; }
aside.notes { display: none; }
"""


def _paragraphs(text: str) -> str:
    return "\n".join(f"<p>{html.escape(p.strip())}</p>" for p in text.split("\n\n") if p.strip())


def _image_src(artifact: SlideArtifact, embed: bool) -> str:
    if embed:
        encoded = base64.b64encode(artifact.image_path.read_bytes()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
    return f"{FIGURE_DIR}/{artifact.image_path.name}"


def _write_html(
    deck: Deck,
    slides: Sequence[Slide],
    artifacts: Sequence[SlideArtifact],
    out_dir: Path,
    embed_images: bool,
) -> Path:
    by_id = {a.slide_id: a for a in artifacts}
    sections = [
        "<section class=\"title\">"
        f"<h1>{html.escape(deck.title)}</h1>"
        + (f"<p><em>{html.escape(deck.subtitle)}</em></p>" if deck.subtitle else "")
        + (f"<p>{html.escape(deck.author)}</p>" if deck.author else "")
        + "</section>"
    ]
    for slide in slides:
        body = [f"<h2>{html.escape(slide.title)}</h2>"]
        if slide.body:
            body.append(_paragraphs(slide.body))
        artifact = by_id.get(slide.slide_id)
        if artifact is not None and artifact.image_path is not None:
            body.append(f"<img src=\"{_image_src(artifact, embed_images)}\" alt=\"{html.escape(slide.title)}\">")
            if slide.show_source:
                body.append(
                    "<details><summary>Figure source</summary><pre><code>"
                    + html.escape(_figure_source(slide))
                    + "</code></pre></details>"
                )
        if slide.notes:
            body.append(f"<aside class=\"notes\">{html.escape(slide.notes)}</aside>")
        sections.append(f"<section id=\"{html.escape(slide.slide_id)}\">" + "\n".join(body) + "</section>")

    document = (
        "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{html.escape(deck.title)}</title>\n<style>{_HTML_STYLE}</style>\n</head>\n"
        "<body>\n<main>\n" + "\n".join(sections) + "\n</main>\n</body>\n</html>\n"
    )
    path = out_dir / "slides.html"
    path.write_text(document, encoding="utf-8")
    log.info("Wrote %s", path)
    return path
