"""Annotated chart composer.

Dataclass specs describe a chart (data, base geoms, annotations); the
renderer draws them with Matplotlib and writes static images.
"""

from __future__ import annotations

from .renderer import build_figure, export_figure
from .specs import (
    ANNOTATION_KINDS,
    GEOMS,
    MARK_SHAPES,
    AnnotationSpec,
    AxesSpec,
    DataSpec,
    FigureSpec,
    LayerSpec,
    PageSpec,
)

__all__ = [
    "FigureSpec",
    "PageSpec",
    "AxesSpec",
    "DataSpec",
    "LayerSpec",
    "AnnotationSpec",
    "ANNOTATION_KINDS",
    "GEOMS",
    "MARK_SHAPES",
    "build_figure",
    "export_figure",
]
