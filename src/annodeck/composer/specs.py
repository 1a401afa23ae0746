"""Figure model for annotated slide charts.

Pure dataclasses describing what to draw. Keep this file free of Matplotlib
imports; renderer.py turns a FigureSpec into a Figure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .templates import DEFAULT_TEMPLATE_ID

__all__ = [
    "PageSpec",
    "AxesSpec",
    "DataSpec",
    "LayerSpec",
    "AnnotationSpec",
    "FigureSpec",
    "GEOMS",
    "ANNOTATION_KINDS",
    "MARK_SHAPES",
]

GEOMS = ("point", "line", "histogram", "density", "col")

ANNOTATION_KINDS = (
    "text",
    "label",
    "data_text",
    "data_label",
    "repel_text",
    "repel_label",
    "rect",
    "hline",
    "vline",
    "abline",
    "segment",
    "arrow",
    "curve",
    "mark",
    "smooth",
    "function",
)

MARK_SHAPES = ("ellipse", "circle", "rect", "hull")


@dataclass
class PageSpec:
    width_in: float = 10.0
    height_in: float = 5.625
    dpi: float = 150.0
    min_margin_in: float = 0.15
    export_background: str = "white"  # "white" or "transparent"
    # effective_* are outputs of build_figure; reset on every build.
    effective_width_in: Optional[float] = None
    effective_height_in: Optional[float] = None


@dataclass
class AxesSpec:
    xlabel: str = ""
    ylabel: str = ""
    title: str = ""
    subtitle: str = ""
    x_range: Optional[Tuple[float, float]] = None  # None = auto
    y_range: Optional[Tuple[float, float]] = None  # None = auto
    show_grid: bool = True
    grid_linestyle: str = "-"
    grid_color: str = "#e0e0e0"
    grid_alpha: float = 0.9
    xlabel_fontsize: Optional[float] = None
    ylabel_fontsize: Optional[float] = None
    tick_label_fontsize: Optional[float] = None
    title_fontsize: Optional[float] = None
    label_bold: bool = False
    legend_visible: bool = True
    legend_loc: str = "best"
    legend_title: str = ""
    legend_fontsize: Optional[float] = None


@dataclass
class DataSpec:
    """Which bundled table to draw, and how to derive it."""

    dataset: str
    query: Optional[str] = None  # pandas query string
    mutate: Optional[Dict[str, str]] = None  # new column -> pandas eval expression
    summary_by: Optional[str] = None
    summary_column: Optional[str] = None
    summary_stat: str = "mean"


@dataclass
class LayerSpec:
    """One base geom drawn from the figure data."""

    geom: str  # see GEOMS
    x: str
    y: Optional[str] = None
    color_by: Optional[str] = None
    color: str = "#333333"
    size: float = 24.0
    alpha: float = 1.0
    bins: int = 30
    linewidth: float = 1.2
    linestyle: str = "-"
    label: str = ""


@dataclass
class AnnotationSpec:
    kind: str  # see ANNOTATION_KINDS
    text: str = ""
    # fixed geometry; None means "extend to the panel edge" for rect
    x: Optional[float] = None
    y: Optional[float] = None
    x2: Optional[float] = None
    y2: Optional[float] = None
    coord_space: str = "data"  # "data" or "axes"
    # text styling
    fontsize: float = 11.0
    fontweight: str = "normal"
    fontstyle: str = "normal"
    family: Optional[str] = None
    ha: str = "center"
    va: str = "center"
    angle: float = 0.0
    # line / fill styling
    color: str = "black"
    fill: Optional[str] = None
    alpha: float = 1.0
    linewidth: float = 1.0
    linestyle: str = "-"
    # data-driven annotations
    data: Optional[DataSpec] = None  # None = use the figure data
    x_column: Optional[str] = None
    y_column: Optional[str] = None
    label_column: Optional[str] = None
    label_filter: Optional[str] = None  # pandas query selecting rows to annotate
    nudge_x: float = 0.0
    nudge_y: float = 0.0
    check_overlap: bool = False
    direction: str = "both"  # repel: "both", "x", "y"
    label_padding: float = 0.25
    # reference lines
    slope: Optional[float] = None
    intercept: Optional[float] = None
    # curves
    curvature: float = 0.3
    # marks
    shape: str = "ellipse"  # see MARK_SHAPES
    group_column: Optional[str] = None
    expand: float = 0.12  # padding in inches
    show_group_label: bool = True
    # statistical overlays
    method: str = "lm"  # "lm" or "poly"
    degree: int = 2
    se: bool = True
    level: float = 0.95
    scale_to_counts: bool = True
    bins: int = 30


@dataclass
class FigureSpec:
    data: DataSpec
    page: PageSpec = field(default_factory=PageSpec)
    axes: AxesSpec = field(default_factory=AxesSpec)
    layers: List[LayerSpec] = field(default_factory=list)
    annotations: List[AnnotationSpec] = field(default_factory=list)
    template_id: str = DEFAULT_TEMPLATE_ID
