"""Annotation primitives layered on top of the base geoms.

Every AnnotationSpec kind maps to one ``_draw_*`` function here. Text
decluttering for the repel kinds is delegated to adjustText; enclosure
outlines for marks come from marks.py.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

import numpy as np
import pandas as pd
from adjustText import adjust_text
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import to_rgba
from matplotlib.patches import Polygon, Rectangle
from scipy import stats

from annodeck.data import resolve_data
from annodeck.errors import SpecError

from .layers import iter_groups
from .marks import enclosure_polygon
from .specs import ANNOTATION_KINDS, AnnotationSpec
from .theme import LABEL_FILL

if TYPE_CHECKING:
    from matplotlib.axes import Axes

log = logging.getLogger(__name__)

__all__ = ["render_annotations", "hide_overlapping"]

_REPEL_ONLY_MOVE = {"both": "xy", "x": "x", "y": "y"}


def render_annotations(ax: "Axes", annotations: List[AnnotationSpec], data: pd.DataFrame) -> list:
    """Draw ``annotations`` in order on ``ax`` and return the created artists."""
    artists: list = []
    for anno in annotations:
        draw = _DRAWERS.get(anno.kind)
        if draw is None:
            raise SpecError(f"Unknown annotation kind {anno.kind!r}; expected one of {ANNOTATION_KINDS}")
        created = draw(ax, anno, data)
        log.debug("Annotation %s added %d artists", anno.kind, len(created))
        artists.extend(created)
    return artists


# ---------------------------------------------------------------------- helpers
def _renderer(ax: "Axes"):
    """Return an Agg renderer for measuring text extents."""
    fig = ax.figure
    if not isinstance(fig.canvas, FigureCanvasAgg):
        FigureCanvasAgg(fig)
    # Resolve pending autoscaling so data->display transforms are final.
    ax.get_xlim()
    ax.get_ylim()
    return fig.canvas.get_renderer()


def _transform(ax: "Axes", anno: AnnotationSpec):
    if anno.coord_space == "axes":
        return ax.transAxes
    if anno.coord_space != "data":
        raise SpecError(f"coord_space must be 'data' or 'axes', got {anno.coord_space!r}")
    return ax.transData


def _text_kwargs(anno: AnnotationSpec) -> dict:
    kwargs = dict(
        fontsize=anno.fontsize,
        color=anno.color,
        fontweight=anno.fontweight,
        fontstyle=anno.fontstyle,
        ha=anno.ha,
        va=anno.va,
        rotation=anno.angle,
        zorder=6,
    )
    if anno.family:
        kwargs["family"] = anno.family
    return kwargs


def _label_box(anno: AnnotationSpec) -> dict:
    return dict(
        boxstyle=f"round,pad={anno.label_padding}",
        fc=to_rgba(anno.fill or LABEL_FILL, anno.alpha),
        ec=anno.color,
        lw=0.6,
    )


def _source_rows(anno: AnnotationSpec, data: pd.DataFrame) -> pd.DataFrame:
    return resolve_data(anno.data) if anno.data is not None else data


def _require(anno: AnnotationSpec, *names: str) -> None:
    missing = [name for name in names if getattr(anno, name) is None]
    if missing:
        raise SpecError(f"{anno.kind} annotation needs {', '.join(missing)}")


def _format_label(anno: AnnotationSpec, **fields) -> str:
    """Fill a label template such as ``"{group}: {value:.1f}"`` from ``fields``."""
    try:
        return anno.text.format(**fields)
    except (KeyError, IndexError) as exc:
        raise SpecError(
            f"{anno.kind} label {anno.text!r} uses an unknown field {exc}; available: {', '.join(fields)}"
        ) from None


def hide_overlapping(ax: "Axes", texts: list) -> int:
    """Hide every text whose box overlaps an earlier visible one; return count hidden."""
    renderer = _renderer(ax)
    kept = []
    hidden = 0
    for text in texts:
        bbox = text.get_window_extent(renderer=renderer)
        if any(bbox.overlaps(other) for other in kept):
            text.set_visible(False)
            hidden += 1
        else:
            kept.append(bbox)
    return hidden


# ---------------------------------------------------------------------- fixed text
def _draw_text(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    _require(anno, "x", "y")
    text = ax.text(anno.x, anno.y, anno.text, transform=_transform(ax, anno), **_text_kwargs(anno))
    return [text]


def _draw_label(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    _require(anno, "x", "y")
    text = ax.text(
        anno.x,
        anno.y,
        anno.text,
        transform=_transform(ax, anno),
        bbox=_label_box(anno),
        **_text_kwargs(anno),
    )
    return [text]


# ---------------------------------------------------------------------- data-driven text
def _data_texts(ax: "Axes", anno: AnnotationSpec, rows: pd.DataFrame, boxed: bool) -> list:
    _require(anno, "x_column", "y_column", "label_column")
    kwargs = _text_kwargs(anno)
    if boxed:
        kwargs["bbox"] = _label_box(anno)
    texts = []
    for x, y, label in zip(rows[anno.x_column], rows[anno.y_column], rows[anno.label_column]):
        texts.append(ax.text(x + anno.nudge_x, y + anno.nudge_y, str(label), **kwargs))
    return texts


def _draw_data_text(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame, boxed: bool = False) -> list:
    rows = _source_rows(anno, data)
    if anno.label_filter:
        rows = rows.query(anno.label_filter)
    texts = _data_texts(ax, anno, rows, boxed)
    if anno.check_overlap:
        hidden = hide_overlapping(ax, texts)
        log.debug("check_overlap hid %d of %d labels", hidden, len(texts))
    return texts


def _draw_data_label(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    return _draw_data_text(ax, anno, data, boxed=True)


def _draw_repel(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame, boxed: bool = False) -> list:
    if anno.direction not in _REPEL_ONLY_MOVE:
        raise SpecError(f"direction must be one of {tuple(_REPEL_ONLY_MOVE)}, got {anno.direction!r}")
    rows = _source_rows(anno, data)
    labelled = rows.query(anno.label_filter) if anno.label_filter else rows
    texts = _data_texts(ax, anno, labelled, boxed)
    if not texts:
        return []

    # Every point repels labels, not only the labelled subset.
    points_x = rows[anno.x_column].to_numpy(dtype=float)
    points_y = rows[anno.y_column].to_numpy(dtype=float)
    move = _REPEL_ONLY_MOVE[anno.direction]
    _renderer(ax)
    adjust_text(
        texts,
        x=points_x,
        y=points_y,
        target_x=labelled[anno.x_column].to_numpy(dtype=float),
        target_y=labelled[anno.y_column].to_numpy(dtype=float),
        ax=ax,
        only_move={"text": move, "static": move, "explode": move, "pull": move},
        ensure_inside_axes=True,
        # Crossing removal swaps whole positions, which would break a one-axis move.
        prevent_crossings=anno.direction == "both",
        arrowprops=dict(arrowstyle="-", color=anno.color, lw=0.5, alpha=0.7),
    )
    return texts


def _draw_repel_label(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    return _draw_repel(ax, anno, data, boxed=True)


# ---------------------------------------------------------------------- shapes and lines
def _draw_rect(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    face = to_rgba(anno.fill or anno.color, anno.alpha)
    edge = anno.color if anno.fill else "none"
    bounds = (anno.x, anno.x2, anno.y, anno.y2)
    if all(v is not None for v in bounds):
        rect = Rectangle(
            (anno.x, anno.y),
            anno.x2 - anno.x,
            anno.y2 - anno.y,
            transform=_transform(ax, anno),
            facecolor=face,
            edgecolor=edge,
            linewidth=anno.linewidth,
            zorder=1,
        )
        return [ax.add_patch(rect)]

    if anno.x is None and anno.x2 is None and anno.y is None and anno.y2 is None:
        raise SpecError("rect annotation needs at least one bound")

    # Missing bounds stretch to the panel edge: x spans use the x-axis
    # transform (data x, axes y) and y spans the y-axis transform.
    if anno.y is None and anno.y2 is None:
        xlim = ax.get_xlim()
        x0 = anno.x if anno.x is not None else xlim[0]
        x1 = anno.x2 if anno.x2 is not None else xlim[1]
        trans, xy, w, h = ax.get_xaxis_transform(), (x0, 0.0), x1 - x0, 1.0
    elif anno.x is None and anno.x2 is None:
        ylim = ax.get_ylim()
        y0 = anno.y if anno.y is not None else ylim[0]
        y1 = anno.y2 if anno.y2 is not None else ylim[1]
        trans, xy, w, h = ax.get_yaxis_transform(), (0.0, y0), 1.0, y1 - y0
    else:
        xlim, ylim = ax.get_xlim(), ax.get_ylim()
        x0 = anno.x if anno.x is not None else xlim[0]
        x1 = anno.x2 if anno.x2 is not None else xlim[1]
        y0 = anno.y if anno.y is not None else ylim[0]
        y1 = anno.y2 if anno.y2 is not None else ylim[1]
        trans, xy, w, h = ax.transData, (x0, y0), x1 - x0, y1 - y0
    rect = Rectangle(xy, w, h, transform=trans, facecolor=face, edgecolor=edge, linewidth=anno.linewidth, zorder=1)
    # add_artist keeps the span out of autoscaling.
    return [ax.add_artist(rect)]


def _reference_values(anno: AnnotationSpec, data: pd.DataFrame, column: Optional[str]) -> pd.DataFrame | None:
    if column is None:
        return None
    rows = _source_rows(anno, data)
    if anno.label_filter:
        rows = rows.query(anno.label_filter)
    return rows


def _draw_hline(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    return _draw_reference(ax, anno, data, horizontal=True)


def _draw_vline(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    return _draw_reference(ax, anno, data, horizontal=False)


def _draw_reference(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame, *, horizontal: bool) -> list:
    column = anno.y_column if horizontal else anno.x_column
    rows = _reference_values(anno, data, column)
    line_kwargs = dict(linewidth=anno.linewidth, linestyle=anno.linestyle, alpha=anno.alpha, zorder=4)
    artists: list = []

    if rows is None:
        value = anno.y if horizontal else anno.x
        if value is None:
            raise SpecError(f"{anno.kind} annotation needs {'y' if horizontal else 'x'} or a column")
        line = ax.axhline(value, color=anno.color, **line_kwargs) if horizontal else ax.axvline(
            value, color=anno.color, **line_kwargs
        )
        artists.append(line)
        if anno.text:
            artists.append(_reference_label(ax, anno, value, anno.text, anno.color, horizontal))
        return artists

    for group, group_rows, color in iter_groups(rows, anno.group_column, anno.color):
        for _, row in group_rows.iterrows():
            value = float(row[column])
            if horizontal:
                artists.append(ax.axhline(value, color=color, **line_kwargs))
            else:
                artists.append(ax.axvline(value, color=color, **line_kwargs))
            label = _row_label(anno, row, group, value)
            if label:
                artists.append(_reference_label(ax, anno, value, label, color, horizontal))
    return artists


def _row_label(anno: AnnotationSpec, row: pd.Series, group: str, value: float) -> str:
    if anno.label_column:
        return str(row[anno.label_column])
    if anno.text:
        return _format_label(anno, group=group, value=value)
    return ""


def _reference_label(ax: "Axes", anno: AnnotationSpec, value: float, label: str, color: str, horizontal: bool):
    if horizontal:
        return ax.text(
            0.99, value + anno.nudge_y, label, transform=ax.get_yaxis_transform(),
            ha="right", va="bottom", fontsize=anno.fontsize, color=color, zorder=6,
        )
    return ax.text(
        value + anno.nudge_x, 0.98, label, transform=ax.get_xaxis_transform(),
        ha="left", va="top", fontsize=anno.fontsize, color=color, rotation=anno.angle, zorder=6,
    )


def _draw_abline(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    _require(anno, "slope")
    intercept = anno.intercept if anno.intercept is not None else 0.0
    line = ax.axline(
        (0.0, intercept),
        slope=anno.slope,
        color=anno.color,
        linewidth=anno.linewidth,
        linestyle=anno.linestyle,
        alpha=anno.alpha,
        zorder=4,
    )
    return [line]


def _draw_connector(ax: "Axes", anno: AnnotationSpec, arrowstyle: str, connectionstyle: str) -> list:
    _require(anno, "x", "y", "x2", "y2")
    coords = "axes fraction" if anno.coord_space == "axes" else "data"
    annotation = ax.annotate(
        anno.text,
        xy=(anno.x2, anno.y2),
        xytext=(anno.x, anno.y),
        xycoords=coords,
        textcoords=coords,
        arrowprops=dict(
            arrowstyle=arrowstyle,
            connectionstyle=connectionstyle,
            color=anno.color,
            linewidth=anno.linewidth,
            linestyle=anno.linestyle,
            shrinkA=2.0 if anno.text else 0.0,
            shrinkB=2.0,
        ),
        **_text_kwargs(anno),
    )
    return [annotation]


def _draw_segment(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    return _draw_connector(ax, anno, "-", "arc3,rad=0")


def _draw_arrow(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    return _draw_connector(ax, anno, "-|>", "arc3,rad=0")


def _draw_curve(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    return _draw_connector(ax, anno, "->", f"arc3,rad={anno.curvature}")


# ---------------------------------------------------------------------- marks
def _axes_scale(ax: "Axes") -> tuple[float, float]:
    """Data units per inch along x and y for the current limits."""
    renderer = _renderer(ax)
    fig = ax.figure
    box = ax.get_window_extent(renderer=renderer).transformed(fig.dpi_scale_trans.inverted())
    x0, x1 = ax.get_xlim()
    y0, y1 = ax.get_ylim()
    return (x1 - x0) / max(box.width, 1e-6), (y1 - y0) / max(box.height, 1e-6)


def _draw_mark(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    _require(anno, "x_column", "y_column")
    rows = _source_rows(anno, data)
    if anno.label_filter:
        rows = rows.query(anno.label_filter)
    if rows.empty:
        log.debug("Mark filter %r selected no rows", anno.label_filter)
        return []

    scale = _axes_scale(ax)
    xlim, ylim = ax.get_xlim(), ax.get_ylim()
    artists: list = []
    for group, group_rows, color in iter_groups(rows, anno.group_column, anno.color):
        points = group_rows[[anno.x_column, anno.y_column]].to_numpy(dtype=float)
        outline = enclosure_polygon(points, anno.shape, expand=anno.expand, scale=scale)
        edge = anno.color if not anno.group_column else color
        patch = Polygon(
            outline,
            closed=True,
            facecolor=to_rgba(anno.fill or edge, anno.alpha),
            edgecolor=edge,
            linewidth=anno.linewidth,
            linestyle=anno.linestyle,
            zorder=2,
        )
        artists.append(ax.add_patch(patch))

        label = _format_label(anno, group=group, n=len(group_rows)) if anno.text else group
        if anno.show_group_label and label:
            top = outline[np.argmax(outline[:, 1])]
            artists.append(
                ax.annotate(
                    label,
                    xy=(top[0], top[1]),
                    xytext=(0, 18),
                    textcoords="offset points",
                    ha="center",
                    va="bottom",
                    fontsize=anno.fontsize,
                    fontweight=anno.fontweight,
                    color=edge,
                    arrowprops=dict(arrowstyle="-", color=edge, linewidth=0.8, shrinkA=0, shrinkB=0),
                    zorder=6,
                )
            )
    # Marks hug the data; keep the panel framing the geoms chose.
    ax.set_xlim(*xlim)
    ax.set_ylim(*ylim)
    return artists


# ---------------------------------------------------------------------- statistical overlays
def _fit_band(x: np.ndarray, y: np.ndarray, degree: int, grid: np.ndarray, level: float):
    """Least-squares polynomial fit with a pointwise confidence band on ``grid``."""
    # Standardise x so high-degree fits on calendar years stay well conditioned.
    center, spread = x.mean(), x.std() or 1.0
    x = (x - center) / spread
    grid = (grid - center) / spread
    design = np.vander(x, degree + 1)
    coef, _, rank, _ = np.linalg.lstsq(design, y, rcond=None)
    dof = max(x.size - rank, 1)
    residual = y - design @ coef
    sigma2 = float(residual @ residual) / dof
    cov = sigma2 * np.linalg.pinv(design.T @ design)
    grid_design = np.vander(grid, degree + 1)
    fit = grid_design @ coef
    se = np.sqrt(np.einsum("ij,jk,ik->i", grid_design, cov, grid_design))
    half = stats.t.ppf(0.5 + level / 2.0, dof) * se
    return fit, fit - half, fit + half


def _draw_smooth(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    _require(anno, "x_column", "y_column")
    if anno.method not in ("lm", "poly"):
        raise SpecError(f"smooth method must be 'lm' or 'poly', got {anno.method!r}")
    degree = 1 if anno.method == "lm" else int(anno.degree)
    rows = _source_rows(anno, data)
    artists: list = []
    for group, group_rows, color in iter_groups(rows, anno.group_column, anno.color):
        clean = group_rows[[anno.x_column, anno.y_column]].dropna()
        x = clean[anno.x_column].to_numpy(dtype=float)
        y = clean[anno.y_column].to_numpy(dtype=float)
        if x.size <= degree + 1:
            log.debug("Smooth for group %r skipped (n=%d)", group, x.size)
            continue
        grid = np.linspace(x.min(), x.max(), 100)
        fit, lower, upper = _fit_band(x, y, degree, grid, anno.level)
        (line,) = ax.plot(
            grid, fit, color=color, linewidth=anno.linewidth, linestyle=anno.linestyle,
            label=anno.text or "_nolegend_", zorder=4,
        )
        artists.append(line)
        if anno.se:
            artists.append(
                ax.fill_between(grid, lower, upper, color=anno.fill or color, alpha=0.2, linewidth=0, zorder=3)
            )
    return artists


def _draw_function(ax: "Axes", anno: AnnotationSpec, data: pd.DataFrame) -> list:
    _require(anno, "x_column")
    rows = _source_rows(anno, data)
    values = rows[anno.x_column].dropna().to_numpy(dtype=float)
    # Same bin width the histogram layer uses for its shared edges.
    binwidth = (values.max() - values.min()) / max(anno.bins, 1) if values.size else 1.0
    x0, x1 = ax.get_xlim()
    grid = np.linspace(x0, x1, 200)
    artists: list = []
    for group, group_rows, color in iter_groups(rows, anno.group_column, anno.color):
        sample = group_rows[anno.x_column].dropna().to_numpy(dtype=float)
        if sample.size < 2:
            continue
        density = stats.norm.pdf(grid, loc=sample.mean(), scale=sample.std(ddof=1))
        if anno.scale_to_counts:
            density = density * sample.size * binwidth
        (line,) = ax.plot(
            grid, density, color=color, linewidth=anno.linewidth, linestyle=anno.linestyle,
            alpha=anno.alpha, zorder=4,
        )
        artists.append(line)
    ax.set_xlim(x0, x1)
    return artists


_DRAWERS: Dict[str, Callable[["Axes", AnnotationSpec, pd.DataFrame], list]] = {
    "text": _draw_text,
    "label": _draw_label,
    "data_text": _draw_data_text,
    "data_label": _draw_data_label,
    "repel_text": _draw_repel,
    "repel_label": _draw_repel_label,
    "rect": _draw_rect,
    "hline": _draw_hline,
    "vline": _draw_vline,
    "abline": _draw_abline,
    "segment": _draw_segment,
    "arrow": _draw_arrow,
    "curve": _draw_curve,
    "mark": _draw_mark,
    "smooth": _draw_smooth,
    "function": _draw_function,
}
