# AnnoDeck
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""The built-in annotation tutorial, one chart per slide."""

from __future__ import annotations

from annodeck.composer.specs import AnnotationSpec, AxesSpec, DataSpec, FigureSpec, LayerSpec
from annodeck.composer.theme import HIGHLIGHT, MUTED

from .model import Deck, Slide

__all__ = ["build_default_deck"]


# ---------------------------------------------------------------------- base charts
def _geyser(*annotations: AnnotationSpec, color_by: str | None = None, title: str = "") -> FigureSpec:
    return FigureSpec(
        data=DataSpec("geyser"),
        axes=AxesSpec(
            xlabel="Eruption duration (min)",
            ylabel="Waiting time to next eruption (min)",
            title=title,
            y_range=(40, 100),
            legend_title="Eruption" if color_by else "",
        ),
        layers=[LayerSpec("point", x="eruptions", y="waiting", color_by=color_by, alpha=0.8)],
        annotations=list(annotations),
    )


def _mtcars(*annotations: AnnotationSpec, title: str = "", point_color: str = "#333333") -> FigureSpec:
    return FigureSpec(
        data=DataSpec("mtcars"),
        axes=AxesSpec(xlabel="Weight (1000 lbs)", ylabel="Miles per gallon", title=title),
        layers=[LayerSpec("point", x="wt", y="mpg", color=point_color, size=30)],
        annotations=list(annotations),
    )


def _heights_histogram(*annotations: AnnotationSpec, title: str = "") -> FigureSpec:
    return FigureSpec(
        data=DataSpec("heights"),
        axes=AxesSpec(xlabel="Height (in)", ylabel="Count", title=title, legend_title="Sex"),
        layers=[LayerSpec("histogram", x="height", color_by="sex", alpha=0.55, bins=30)],
        annotations=list(annotations),
    )


def _climate(*annotations: AnnotationSpec, title: str = "") -> FigureSpec:
    return FigureSpec(
        data=DataSpec("climate"),
        axes=AxesSpec(
            xlabel="Year",
            ylabel="Temperature anomaly (°C)",
            title=title,
            subtitle="relative to the 1951-1980 mean",
            y_range=(-0.7, 1.4),
        ),
        layers=[LayerSpec("line", x="year", y="anomaly", color="#3b6ea5", linewidth=1.4)],
        annotations=list(annotations),
    )


def _car_labels(kind: str, **overrides) -> AnnotationSpec:
    params = dict(x_column="wt", y_column="mpg", label_column="model", fontsize=9)
    params.update(overrides)
    return AnnotationSpec(kind, **params)


# ---------------------------------------------------------------------- slides
def _intro_slides() -> list[Slide]:
    return [
        Slide(
            "intro",
            "Annotating statistical charts",
            body=(
                "A chart shows the data; annotations say what to look at.\n\n"
                "Every slide that follows starts from a plain chart and adds a single "
                "annotation layer: text, labels, lines, shaded regions or highlight marks."
            ),
            show_source=False,
        ),
    ]


def _fixed_position_slides() -> list[Slide]:
    return [
        Slide(
            "text",
            "Text at a fixed position",
            body="Place free text in data coordinates to name the two eruption regimes.",
            figure=_geyser(
                AnnotationSpec("text", text="Short eruptions,\nshort waits", x=2.0, y=75, fontsize=13),
                AnnotationSpec(
                    "text", text="Long eruptions,\nlong waits", x=4.3, y=96, fontsize=13, fontstyle="italic"
                ),
            ),
        ),
        Slide(
            "label",
            "Labels: text with a box",
            body="A boxed label stays readable on top of points. Axes coordinates pin a note to a corner.",
            figure=_geyser(
                AnnotationSpec("label", text="Short eruptions", x=2.0, y=72, fill="#fff7bc", fontsize=12),
                AnnotationSpec("label", text="Long eruptions", x=4.3, y=96, fill="#fff7bc", fontsize=12),
                AnnotationSpec(
                    "text", text="Seeded sample of 272 eruptions", x=0.99, y=0.02, coord_space="axes",
                    ha="right", va="bottom", fontsize=9, color=MUTED,
                ),
            ),
        ),
        Slide(
            "rect",
            "Shading a region",
            body="A translucent rectangle draws the eye to a region without hiding the points.",
            figure=_geyser(
                AnnotationSpec("rect", x=3.4, x2=5.2, y=68, y2=97, fill="#fdae6b", alpha=0.3, color="#e6550d"),
                AnnotationSpec("text", text="Long eruptions", x=3.5, y=66, ha="left", va="top", color="#e6550d"),
            ),
        ),
        Slide(
            "reference-lines",
            "Reference lines",
            body="Horizontal and vertical lines mark thresholds and typical values.",
            figure=_geyser(
                AnnotationSpec("hline", y=71, color=MUTED, linestyle="--", text="typical wait: 71 min"),
                AnnotationSpec("vline", x=3.0, color=HIGHLIGHT, linestyle=":", linewidth=1.5),
                AnnotationSpec("text", text="3-minute split", x=3.05, y=42, ha="left", va="bottom", color=HIGHLIGHT),
            ),
        ),
        Slide(
            "abline",
            "Lines with a slope",
            body="An arbitrary line, here a rule-of-thumb weight for a given height.",
            figure=FigureSpec(
                data=DataSpec("heights"),
                axes=AxesSpec(xlabel="Height (in)", ylabel="Weight (lb)", legend_title="Sex"),
                layers=[LayerSpec("point", x="height", y="weight", color_by="sex", alpha=0.7)],
                annotations=[
                    AnnotationSpec("abline", slope=5.2, intercept=-200, color=MUTED, linestyle="--"),
                    AnnotationSpec(
                        "label", text="weight = 5.2 × height − 200", x=0.03, y=0.95, coord_space="axes",
                        ha="left", va="top", fontsize=10,
                    ),
                ],
            ),
        ),
        Slide(
            "arrows",
            "Segments, arrows and curves",
            body="Connect a note to the feature it describes. Curvature keeps the connector off the data.",
            figure=_geyser(
                AnnotationSpec("arrow", text="dense cluster", x=2.6, y=90, x2=2.05, y2=58, color=HIGHLIGHT),
                AnnotationSpec(
                    "curve", text="longest waits", x=3.1, y=45, x2=4.4, y2=90, curvature=0.4, color="#3b6ea5"
                ),
                AnnotationSpec("segment", x=1.7, y=44, x2=2.4, y2=44, linewidth=2.0, color=MUTED),
            ),
        ),
    ]


def _data_driven_slides() -> list[Slide]:
    return [
        Slide(
            "data-text",
            "Text from the data",
            body="One label per row, positioned by the data. With many rows the labels collide.",
            figure=_mtcars(_car_labels("data_text", va="bottom", nudge_y=0.3)),
        ),
        Slide(
            "check-overlap",
            "Dropping overlapping labels",
            body="Labels are drawn in row order; any label that would overlap an earlier one is dropped.",
            figure=_mtcars(_car_labels("data_text", va="bottom", nudge_y=0.3, check_overlap=True)),
        ),
        Slide(
            "data-label",
            "Boxed labels from the data",
            body="Label only the rows that matter, nudged off their points.",
            figure=_mtcars(
                _car_labels("data_label", label_filter="mpg > 30", nudge_x=0.15, ha="left", fill="#e5f5e0"),
            ),
        ),
        Slide(
            "repel-text",
            "Repelled text",
            body="A repulsion layout moves labels away from each other and from the points, "
            "with a leader line back to each point.",
            figure=_mtcars(_car_labels("repel_text")),
        ),
        Slide(
            "repel-direction",
            "Repelled labels: nudge and direction",
            body="Nudge labels into empty space, then let them move only vertically so they line up.",
            figure=_mtcars(
                _car_labels(
                    "repel_label",
                    label_filter="wt > 5",
                    nudge_x=-1.2,
                    direction="y",
                    ha="right",
                    fill="#deebf7",
                ),
            ),
        ),
        Slide(
            "repel-subset",
            "Highlight a subset",
            body="Mute every point, then label only the group the story is about.",
            figure=_mtcars(
                _car_labels("repel_label", label_filter="cyl == 6", color=HIGHLIGHT, fill="#fee0d2"),
                point_color=MUTED,
            ),
        ),
    ]


def _summary_slides() -> list[Slide]:
    mean_heights = DataSpec("heights", summary_by="sex", summary_column="height", summary_stat="mean")
    return [
        Slide(
            "group-means",
            "Lines from a summary table",
            body="Compute the mean height per sex with one aggregation, then draw a line per row.",
            figure=_heights_histogram(
                AnnotationSpec(
                    "vline",
                    data=mean_heights,
                    x_column="height",
                    group_column="sex",
                    linestyle="--",
                    linewidth=1.5,
                    text="{group} mean: {value:.1f} in",
                    nudge_x=0.2,
                    fontsize=10,
                ),
            ),
        ),
        Slide(
            "climate",
            "Context on a time series",
            body="Shade a period, mark the baseline and name what the reader sees.",
            figure=_climate(
                AnnotationSpec("rect", x=1940, x2=1975, fill="#bdbdbd", alpha=0.3),
                AnnotationSpec("text", text="mid-century plateau", x=1957, y=1.25, fontsize=10, color=MUTED),
                AnnotationSpec("hline", y=0.0, color="black", linewidth=0.8),
                AnnotationSpec(
                    "data_label", label_filter="year == 2020", x_column="year", y_column="anomaly",
                    label_column="anomaly", ha="right", va="bottom", nudge_x=-2, nudge_y=0.05, fontsize=10,
                ),
            ),
        ),
    ]


def _mark_slides() -> list[Slide]:
    return [
        Slide(
            "mark-ellipse",
            "Marking groups: ellipse",
            body="An ellipse drawn around each group, labelled with the group name.",
            figure=_geyser(
                AnnotationSpec(
                    "mark", shape="ellipse", x_column="eruptions", y_column="waiting", group_column="kind",
                    alpha=0.12, text="{group} eruptions", fontsize=11,
                ),
                color_by="kind",
            ),
        ),
        Slide(
            "mark-circle",
            "Marking groups: circle",
            body="Highlight a single group by filtering the rows the mark encloses.",
            figure=_geyser(
                AnnotationSpec(
                    "mark", shape="circle", x_column="eruptions", y_column="waiting",
                    label_filter="kind == 'short'", color=HIGHLIGHT, alpha=0.1, text="Short eruptions",
                ),
            ),
        ),
        Slide(
            "mark-rect",
            "Marking groups: rectangle",
            body="A padded bounding box around the heaviest cars.",
            figure=_mtcars(
                AnnotationSpec(
                    "mark", shape="rect", x_column="wt", y_column="mpg", label_filter="wt > 5",
                    color="#3b6ea5", alpha=0.12, text="Over 5,000 lbs",
                ),
            ),
        ),
        Slide(
            "mark-hull",
            "Marking groups: hull",
            body="A convex hull follows the shape of each group more closely than an ellipse.",
            figure=FigureSpec(
                data=DataSpec("mtcars"),
                axes=AxesSpec(xlabel="Weight (1000 lbs)", ylabel="Miles per gallon", legend_title="Cylinders"),
                layers=[LayerSpec("point", x="wt", y="mpg", color_by="cyl", size=30)],
                annotations=[
                    AnnotationSpec(
                        "mark", shape="hull", x_column="wt", y_column="mpg", group_column="cyl",
                        alpha=0.12, text="{group} cylinders", fontsize=10,
                    ),
                ],
            ),
        ),
    ]


def _curve_slides() -> list[Slide]:
    return [
        Slide(
            "smooth-lm",
            "A fitted line with its uncertainty",
            body="A linear fit with a 95% confidence band summarises the trend behind the points.",
            figure=_mtcars(
                AnnotationSpec("smooth", method="lm", x_column="wt", y_column="mpg", color="#3b6ea5", linewidth=1.5),
            ),
        ),
        Slide(
            "smooth-poly",
            "A smooth trend on a time series",
            body="A cubic fit shows the long-run shape of the series.",
            figure=_climate(
                AnnotationSpec(
                    "smooth", method="poly", degree=3, x_column="year", y_column="anomaly",
                    color=HIGHLIGHT, linewidth=2.0, text="cubic trend",
                ),
            ),
        ),
        Slide(
            "normal-curve",
            "A reference distribution",
            body="Overlay a normal curve fitted to each group, scaled to the histogram counts.",
            figure=_heights_histogram(
                AnnotationSpec("function", x_column="height", group_column="sex", linewidth=2.0, bins=30),
            ),
        ),
    ]


def build_default_deck() -> Deck:
    """Return the annotation tutorial in presentation order."""
    slides = (
        _intro_slides()
        + _fixed_position_slides()
        + _data_driven_slides()
        + _summary_slides()
        + _mark_slides()
        + _curve_slides()
    )
    deck = Deck(
        title="Annotating charts",
        subtitle="Text, labels, lines, shaded regions and highlight marks",
        slides=slides,
    )
    deck.validate()
    return deck
