"""Base geoms drawn underneath the annotations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from annodeck.errors import SpecError

from .specs import GEOMS, LayerSpec
from .theme import group_colors

if TYPE_CHECKING:
    from matplotlib.axes import Axes

log = logging.getLogger(__name__)

__all__ = ["draw_layers", "iter_groups"]


def iter_groups(
    df: pd.DataFrame, column: Optional[str], default_color: str
) -> Iterator[Tuple[str, pd.DataFrame, str]]:
    """Yield (label, rows, colour) per level of ``column`` or once for all rows."""
    if not column:
        yield "", df, default_color
        return
    colors = group_colors(df[column])
    for level, color in colors.items():
        yield str(level), df[df[column] == level], color


def draw_layers(ax: "Axes", layers: List[LayerSpec], df: pd.DataFrame) -> None:
    for layer in layers:
        if layer.geom not in GEOMS:
            raise SpecError(f"Unknown geom {layer.geom!r}; expected one of {GEOMS}")
        if layer.geom in ("point", "line", "col") and not layer.y:
            raise SpecError(f"geom {layer.geom!r} needs a y column")
        draw = _DRAWERS[layer.geom]
        draw(ax, layer, df)
        log.debug("Drew %s layer (%d rows)", layer.geom, len(df))


def _legend_label(layer: LayerSpec, group: str) -> str:
    return group or layer.label or "_nolegend_"


def _draw_point(ax: "Axes", layer: LayerSpec, df: pd.DataFrame) -> None:
    for group, rows, color in iter_groups(df, layer.color_by, layer.color):
        ax.scatter(
            rows[layer.x],
            rows[layer.y],
            s=layer.size,
            color=color,
            alpha=layer.alpha,
            edgecolors="none",
            label=_legend_label(layer, group),
            zorder=3,
        )


def _draw_line(ax: "Axes", layer: LayerSpec, df: pd.DataFrame) -> None:
    for group, rows, color in iter_groups(df, layer.color_by, layer.color):
        rows = rows.sort_values(layer.x)
        ax.plot(
            rows[layer.x],
            rows[layer.y],
            color=color,
            alpha=layer.alpha,
            linewidth=layer.linewidth,
            linestyle=layer.linestyle,
            solid_capstyle="round",
            label=_legend_label(layer, group),
            zorder=3,
        )


def _draw_histogram(ax: "Axes", layer: LayerSpec, df: pd.DataFrame) -> None:
    # Shared edges so grouped histograms line up.
    edges = np.histogram_bin_edges(df[layer.x].dropna(), bins=layer.bins)
    for group, rows, color in iter_groups(df, layer.color_by, layer.color):
        ax.hist(
            rows[layer.x].dropna(),
            bins=edges,
            color=color,
            alpha=layer.alpha if layer.color_by else max(layer.alpha, 0.9),
            edgecolor="white",
            linewidth=0.5,
            label=_legend_label(layer, group),
            zorder=2,
        )


def _draw_density(ax: "Axes", layer: LayerSpec, df: pd.DataFrame) -> None:
    values = df[layer.x].dropna().to_numpy(dtype=float)
    grid = np.linspace(values.min(), values.max(), 256)
    pad = 0.1 * (grid[-1] - grid[0] or 1.0)
    grid = np.linspace(grid[0] - pad, grid[-1] + pad, 256)
    for group, rows, color in iter_groups(df, layer.color_by, layer.color):
        sample = rows[layer.x].dropna().to_numpy(dtype=float)
        if sample.size < 2:
            log.debug("Density for group %r skipped (n=%d)", group, sample.size)
            continue
        density = stats.gaussian_kde(sample)(grid)
        ax.plot(grid, density, color=color, linewidth=layer.linewidth, label=_legend_label(layer, group))
        ax.fill_between(grid, density, color=color, alpha=layer.alpha * 0.35, linewidth=0)


def _draw_col(ax: "Axes", layer: LayerSpec, df: pd.DataFrame) -> None:
    if layer.color_by:
        colors = [group_colors(df[layer.color_by])[level] for level in df[layer.color_by]]
    else:
        colors = layer.color
    ax.bar(
        df[layer.x].astype(str),
        df[layer.y],
        color=colors,
        alpha=layer.alpha,
        width=0.7,
        label=layer.label or "_nolegend_",
        zorder=2,
    )


_DRAWERS = {
    "point": _draw_point,
    "line": _draw_line,
    "histogram": _draw_histogram,
    "density": _draw_density,
    "col": _draw_col,
}
