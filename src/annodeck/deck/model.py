"""Slide and deck records plus their JSON form."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from annodeck.composer.spec_serialization import figure_spec_from_dict, figure_spec_to_dict
from annodeck.composer.specs import FigureSpec
from annodeck.errors import SpecError

__all__ = ["Slide", "Deck", "deck_to_dict", "deck_from_dict", "load_deck", "save_deck"]

DECK_VERSION = 1


@dataclass
class Slide:
    slide_id: str
    title: str
    body: str = ""  # Markdown paragraphs shown above the figure
    figure: Optional[FigureSpec] = None
    notes: str = ""
    show_source: bool = True  # include the figure definition as a code block


@dataclass
class Deck:
    title: str
    subtitle: str = ""
    author: str = ""
    slides: List[Slide] = field(default_factory=list)

    def validate(self) -> None:
        """Raise SpecError on empty or duplicate slide ids."""
        ids = [slide.slide_id for slide in self.slides]
        if any(not slide_id for slide_id in ids):
            raise SpecError("Every slide needs a slide_id")
        dupes = sorted(slide_id for slide_id, n in Counter(ids).items() if n > 1)
        if dupes:
            raise SpecError(f"Duplicate slide ids: {', '.join(dupes)}")

    def get(self, slide_id: str) -> Slide:
        for slide in self.slides:
            if slide.slide_id == slide_id:
                return slide
        raise KeyError(slide_id)


def slide_to_dict(slide: Slide) -> Dict[str, Any]:
    return {
        "slide_id": slide.slide_id,
        "title": slide.title,
        "body": slide.body,
        "figure": figure_spec_to_dict(slide.figure) if slide.figure is not None else None,
        "notes": slide.notes,
        "show_source": slide.show_source,
    }


def slide_from_dict(raw: Dict[str, Any]) -> Slide:
    if "slide_id" not in raw:
        raise SpecError("slide needs a 'slide_id'")
    figure_raw = raw.get("figure")
    return Slide(
        slide_id=str(raw["slide_id"]),
        title=raw.get("title", ""),
        body=raw.get("body", ""),
        figure=figure_spec_from_dict(figure_raw) if figure_raw else None,
        notes=raw.get("notes", ""),
        show_source=bool(raw.get("show_source", True)),
    )


def deck_to_dict(deck: Deck) -> Dict[str, Any]:
    return {
        "deck_version": DECK_VERSION,
        "title": deck.title,
        "subtitle": deck.subtitle,
        "author": deck.author,
        "slides": [slide_to_dict(slide) for slide in deck.slides],
    }


def deck_from_dict(raw: Dict[str, Any]) -> Deck:
    deck = Deck(
        title=raw.get("title", ""),
        subtitle=raw.get("subtitle", ""),
        author=raw.get("author", ""),
        slides=[slide_from_dict(s) for s in raw.get("slides", []) or []],
    )
    deck.validate()
    return deck


def save_deck(path: str | Path, deck: Deck) -> None:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(deck_to_dict(deck), f, indent=2)


def load_deck(path: str | Path) -> Deck:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return deck_from_dict(raw)
