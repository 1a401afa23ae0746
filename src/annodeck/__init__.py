# AnnoDeck
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Public package interface for AnnoDeck."""

from annodeck.composer import (
    AnnotationSpec,
    AxesSpec,
    DataSpec,
    FigureSpec,
    LayerSpec,
    PageSpec,
    build_figure,
    export_figure,
)
from annodeck.core.config import APP_VERSION
from annodeck.data import group_summary, list_datasets, load_dataset
from annodeck.deck import Deck, Slide, build_default_deck, load_deck, render_deck, save_deck
from annodeck.errors import AnnoDeckError, DatasetNotFoundError, RenderError, SpecError

__version__ = APP_VERSION

__all__ = [
    "AnnotationSpec",
    "AxesSpec",
    "DataSpec",
    "FigureSpec",
    "LayerSpec",
    "PageSpec",
    "build_figure",
    "export_figure",
    "group_summary",
    "list_datasets",
    "load_dataset",
    "Deck",
    "Slide",
    "build_default_deck",
    "load_deck",
    "save_deck",
    "render_deck",
    "AnnoDeckError",
    "DatasetNotFoundError",
    "RenderError",
    "SpecError",
]
