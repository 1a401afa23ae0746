"""Slide decks: the built-in tutorial, its JSON form and the document writers."""

from __future__ import annotations

from .catalog import build_default_deck
from .model import Deck, Slide, deck_from_dict, deck_to_dict, load_deck, save_deck
from .writer import DeckRenderResult, SlideArtifact, render_deck

__all__ = [
    "Deck",
    "Slide",
    "DeckRenderResult",
    "SlideArtifact",
    "build_default_deck",
    "deck_from_dict",
    "deck_to_dict",
    "load_deck",
    "save_deck",
    "render_deck",
]
