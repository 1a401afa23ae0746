"""Single-axes Matplotlib renderer for annotated slide charts.

Turns a FigureSpec into a Figure and writes it to disk. Uses Figure and
FigureCanvasAgg directly (no pyplot state) so slides render headless.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict

from matplotlib import rcParams
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from annodeck.data import resolve_data
from annodeck.errors import RenderError

from .annotations import render_annotations
from .layers import draw_layers
from .specs import AxesSpec, FigureSpec, PageSpec
from .templates import get_template_preset
from .theme import MUTED, TEXT

if TYPE_CHECKING:
    from matplotlib.axes import Axes

log = logging.getLogger(__name__)

_MIN_PAGE_WIDTH_IN = 2.0
_MIN_PAGE_HEIGHT_IN = 1.5
_MAX_PAGE_WIDTH_IN = 20.0
_MAX_PAGE_HEIGHT_IN = 20.0
_MAX_EXPORT_PX = 8000

__all__ = ["build_figure", "export_figure"]


def build_figure(spec: FigureSpec, fig: Figure | None = None) -> Figure:
    """Draw data layers, axes styling and annotations for ``spec``."""
    page = spec.page
    _clamp_page_size(page)
    page.effective_width_in = None
    page.effective_height_in = None

    if fig is None:
        fig = Figure(figsize=(page.width_in, page.height_in), dpi=page.dpi)
    else:
        fig.clear()
        fig.set_size_inches(page.width_in, page.height_in, forward=False)
        fig.set_dpi(page.dpi)
    FigureCanvasAgg(fig)
    fig.patch.set_facecolor("white")
    ax = fig.add_subplot(111)

    df = resolve_data(spec.data)
    log.debug("Rendering %s (%d rows, %d layers, %d annotations)",
              spec.data.dataset, len(df), len(spec.layers), len(spec.annotations))

    draw_layers(ax, spec.layers, df)

    if spec.axes.x_range is not None:
        ax.set_xlim(*spec.axes.x_range)
    if spec.axes.y_range is not None:
        ax.set_ylim(*spec.axes.y_range)

    fonts = _effective_fonts(spec.axes, spec.template_id)
    _apply_axes_styles(ax, spec.axes, fonts)
    # Annotations measure text and inches per data unit, so the axes must
    # already have their final position.
    _apply_layout(fig, page)
    for artist in render_annotations(ax, spec.annotations, df):
        artist.set_in_layout(False)
    _apply_legend(ax, spec.axes, fonts)
    _apply_layout(fig, page)

    page.effective_width_in = fig.get_figwidth()
    page.effective_height_in = fig.get_figheight()
    return fig


def export_figure(
    spec: FigureSpec,
    out_path: str | Path,
    transparent: bool = False,
    export_background: str | None = None,
) -> Path:
    """Render ``spec`` and save it to ``out_path``; return the written path."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig = build_figure(spec)

    page = spec.page
    w_in = page.effective_width_in or page.width_in
    h_in = page.effective_height_in or page.height_in
    # bbox_inches="tight" saves the content box plus padding, which can
    # reach past the page edge.
    pad_in = float(rcParams["savefig.pad_inches"])
    tight = fig.get_tightbbox(fig.canvas.get_renderer())
    w_in = max(w_in, tight.width + 2 * pad_in)
    h_in = max(h_in, tight.height + 2 * pad_in)
    dpi = page.dpi
    width_px = w_in * dpi
    height_px = h_in * dpi

    if width_px > _MAX_EXPORT_PX or height_px > _MAX_EXPORT_PX:
        # One pixel of headroom for rounding in the Agg canvas size.
        scale = (_MAX_EXPORT_PX - 1) / max(width_px, height_px)
        old_dpi = dpi
        dpi = dpi * scale
        log.warning(
            "Export size clamped from %.0fx%.0f px (%.0f dpi) to %.0fx%.0f px (%.0f dpi)",
            width_px,
            height_px,
            old_dpi,
            w_in * dpi,
            h_in * dpi,
            dpi,
        )

    bg_mode = export_background or page.export_background
    if transparent:
        bg_mode = "transparent"
    savefig_kwargs = _apply_export_background(fig, bg_mode)

    fig.savefig(out_path, dpi=dpi, bbox_inches="tight", **savefig_kwargs)

    size = out_path.stat().st_size if out_path.exists() else 0
    if size == 0:
        raise RenderError(f"Rendering produced an empty file: {out_path}")
    log.info("Wrote %s (%.0fx%.0f px, %d bytes)", out_path.name, w_in * dpi, h_in * dpi, size)
    return out_path


def _apply_layout(fig: Figure, page: PageSpec) -> None:
    try:
        fig.tight_layout(pad=max(page.min_margin_in, 0.1) * 4.0)
    except ValueError:
        log.debug("tight_layout skipped", exc_info=True)


def _clamp_page_size(page: PageSpec) -> None:
    """Enforce a minimum physical size to keep labels visible."""
    page.width_in = min(max(float(page.width_in), _MIN_PAGE_WIDTH_IN), _MAX_PAGE_WIDTH_IN)
    page.height_in = min(max(float(page.height_in), _MIN_PAGE_HEIGHT_IN), _MAX_PAGE_HEIGHT_IN)


def _effective_fonts(axes_spec: AxesSpec, template_id: str) -> Dict[str, float]:
    """Per-axes font sizes, falling back to the template defaults."""
    defaults = get_template_preset(template_id).style_defaults
    return {
        name: getattr(axes_spec, name) or defaults[name]
        for name in (
            "xlabel_fontsize",
            "ylabel_fontsize",
            "tick_label_fontsize",
            "title_fontsize",
            "legend_fontsize",
        )
    }


def _apply_axes_styles(ax: "Axes", axes_spec: AxesSpec, fonts: Dict[str, float]) -> None:
    """Axis labels, titles, ticks, spines and grid."""
    label_weight = "bold" if axes_spec.label_bold else "normal"
    ax.set_xlabel(axes_spec.xlabel, fontsize=fonts["xlabel_fontsize"], fontweight=label_weight, color=TEXT, labelpad=6)
    ax.set_ylabel(axes_spec.ylabel, fontsize=fonts["ylabel_fontsize"], fontweight=label_weight, color=TEXT, labelpad=8)
    if axes_spec.title:
        ax.set_title(axes_spec.title, loc="left", fontsize=fonts["title_fontsize"], fontweight="bold", color=TEXT)
    if axes_spec.subtitle:
        ax.set_title(axes_spec.subtitle, loc="right", fontsize=fonts["tick_label_fontsize"], color=MUTED)

    ax.tick_params(
        axis="both",
        which="major",
        labelsize=fonts["tick_label_fontsize"],
        direction="out",
        length=4,
        width=0.8,
        colors=MUTED,
        labelcolor=TEXT,
    )

    # Light frame: bottom/left spines only
    for name, spine in ax.spines.items():
        if name in ("top", "right"):
            spine.set_visible(False)
        else:
            spine.set_linewidth(0.8)
            spine.set_edgecolor(MUTED)

    if axes_spec.show_grid:
        ax.grid(
            True,
            which="major",
            linestyle=axes_spec.grid_linestyle or "-",
            color=axes_spec.grid_color or "#e0e0e0",
            linewidth=0.6,
            alpha=axes_spec.grid_alpha,
        )
        ax.set_axisbelow(True)
    else:
        ax.grid(False)


def _apply_legend(ax: "Axes", axes_spec: AxesSpec, fonts: Dict[str, float]) -> None:
    if not axes_spec.legend_visible:
        return
    handles, labels = ax.get_legend_handles_labels()
    if not handles:
        return
    leg = ax.legend(
        handles,
        labels,
        title=axes_spec.legend_title or None,
        fontsize=fonts["legend_fontsize"],
        title_fontsize=fonts["legend_fontsize"],
        loc=axes_spec.legend_loc,
        framealpha=0.85,
    )
    frame = leg.get_frame()
    if frame is not None:
        frame.set_linewidth(0.6)


def _apply_export_background(fig: Figure, mode: str) -> Dict[str, object]:
    """Set figure/axes background and return savefig kwargs for the mode."""
    normalized = "transparent" if str(mode).lower() == "transparent" else "white"
    facecolor = "none" if normalized == "transparent" else "white"
    fig.patch.set_facecolor(facecolor)
    fig.patch.set_alpha(0.0 if normalized == "transparent" else 1.0)
    for axis in fig.axes:
        axis.set_facecolor(facecolor)

    if normalized == "transparent":
        return {"transparent": True}
    return {"transparent": False, "facecolor": facecolor, "edgecolor": facecolor}
