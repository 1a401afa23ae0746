from pathlib import Path

import numpy as np
import pytest
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import Polygon
from PIL import Image

from annodeck.composer.renderer import build_figure, export_figure
from annodeck.composer.specs import AnnotationSpec, AxesSpec, DataSpec, FigureSpec, LayerSpec, PageSpec
from annodeck.composer.templates import apply_template_preset, get_template_preset, list_templates
from annodeck.errors import RenderError, SpecError


def _base_spec(template_id: str = "slide") -> FigureSpec:
    page = PageSpec(width_in=6.0, height_in=4.0, dpi=100.0)
    axes = AxesSpec(xlabel="Weight", ylabel="MPG", title="Cars")
    layer = LayerSpec("point", x="wt", y="mpg")
    return FigureSpec(data=DataSpec("mtcars"), page=page, axes=axes, layers=[layer], template_id=template_id)


def test_build_figure_is_headless_and_sized():
    spec = _base_spec()
    fig = build_figure(spec)
    assert isinstance(fig.canvas, FigureCanvasAgg)
    assert len(fig.axes) == 1
    assert fig.get_figwidth() == pytest.approx(6.0)
    assert spec.page.effective_width_in == pytest.approx(6.0)
    assert spec.page.effective_height_in == pytest.approx(4.0)


def test_build_figure_reuses_a_figure():
    spec = _base_spec()
    fig = build_figure(spec)
    spec.page.width_in = 8.0
    again = build_figure(spec, fig)
    assert again is fig
    assert len(fig.axes) == 1
    assert fig.get_figwidth() == pytest.approx(8.0)


def test_page_size_is_clamped():
    spec = _base_spec()
    spec.page.width_in = 0.5
    spec.page.height_in = 50.0
    build_figure(spec)
    assert spec.page.width_in == pytest.approx(2.0)
    assert spec.page.height_in == pytest.approx(20.0)


def test_axes_ranges_and_titles():
    spec = _base_spec()
    spec.axes.x_range = (1.0, 6.0)
    spec.axes.y_range = (10.0, 35.0)
    spec.axes.subtitle = "mtcars"
    ax = build_figure(spec).axes[0]
    assert ax.get_xlim() == pytest.approx((1.0, 6.0))
    assert ax.get_ylim() == pytest.approx((10.0, 35.0))
    assert ax.get_title(loc="left") == "Cars"
    assert ax.get_title(loc="right") == "mtcars"
    assert not ax.spines["top"].get_visible()


def test_fonts_fall_back_to_template():
    spec = _base_spec("handout")
    ax = build_figure(spec).axes[0]
    defaults = get_template_preset("handout").style_defaults
    assert ax.xaxis.label.get_fontsize() == pytest.approx(defaults["xlabel_fontsize"])

    spec.axes.xlabel_fontsize = 20.0
    ax = build_figure(spec).axes[0]
    assert ax.xaxis.label.get_fontsize() == pytest.approx(20.0)


def test_legend_only_for_grouped_layers():
    spec = _base_spec()
    assert build_figure(spec).axes[0].get_legend() is None

    spec.layers[0].color_by = "cyl"
    spec.axes.legend_title = "Cylinders"
    legend = build_figure(spec).axes[0].get_legend()
    assert legend is not None
    assert [t.get_text() for t in legend.get_texts()] == ["4", "6", "8"]

    spec.axes.legend_visible = False
    assert build_figure(spec).axes[0].get_legend() is None


def test_unknown_geom_is_rejected():
    spec = _base_spec()
    spec.layers = [LayerSpec("violin", x="wt", y="mpg")]
    with pytest.raises(SpecError):
        build_figure(spec)
    spec.layers = [LayerSpec("point", x="wt")]
    with pytest.raises(SpecError):
        build_figure(spec)


@pytest.mark.parametrize("geom", ["histogram", "density"])
def test_distribution_geoms(geom):
    spec = FigureSpec(data=DataSpec("heights"), layers=[LayerSpec(geom, x="height", color_by="sex")])
    ax = build_figure(spec).axes[0]
    assert ax.has_data()


def test_export_writes_png(tmp_path):
    spec = _base_spec()
    spec.annotations = [AnnotationSpec("label", text="light", x=2.0, y=30.0)]
    out = export_figure(spec, tmp_path / "nested" / "cars.png")
    assert out.exists()
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_export_transparent(tmp_path):
    spec = _base_spec()
    out = export_figure(spec, tmp_path / "cars.png", transparent=True)
    assert out.stat().st_size > 0


def test_template_switch_keeps_overrides():
    spec = _base_spec()
    defaults = apply_template_preset(spec, "slide", respect_overrides=False)
    slide_layout = get_template_preset("slide").layout_defaults
    assert spec.page.width_in == pytest.approx(slide_layout["width_in"])

    spec.page.height_in = 3.0  # user override
    apply_template_preset(spec, "slide_square", defaults, respect_overrides=True)
    square = get_template_preset("slide_square").layout_defaults

    assert spec.template_id == "slide_square"
    assert spec.page.width_in == pytest.approx(square["width_in"])
    assert spec.page.height_in == pytest.approx(3.0)


def test_unknown_template_falls_back_to_default():
    spec = _base_spec()
    apply_template_preset(spec, "poster", respect_overrides=False)
    assert spec.template_id == "slide"
    assert "handout" in list_templates()


def test_mark_circle_is_round_in_the_final_layout():
    spec = FigureSpec(
        data=DataSpec("geyser"),
        page=PageSpec(width_in=10.0, height_in=5.625, dpi=80.0),
        axes=AxesSpec(xlabel="Eruption", ylabel="Waiting", title="Circle", y_range=(40, 100)),
        layers=[LayerSpec("point", x="eruptions", y="waiting")],
        annotations=[
            AnnotationSpec(
                "mark", shape="circle", x_column="eruptions", y_column="waiting",
                label_filter="kind == 'short'", text="Short eruptions",
            )
        ],
    )
    fig = build_figure(spec)
    fig.canvas.draw()
    ax = fig.axes[0]
    (circle,) = [p for p in ax.patches if isinstance(p, Polygon)]
    display = ax.transData.transform(circle.get_xy())
    width = np.ptp(display[:, 0])
    height = np.ptp(display[:, 1])
    assert width / height == pytest.approx(1.0, abs=0.01)


def test_export_clamps_pixel_size(tmp_path):
    spec = _base_spec()
    spec.page = PageSpec(width_in=20.0, height_in=2.0, dpi=1000.0)
    out = export_figure(spec, tmp_path / "wide.png")
    with Image.open(out) as image:
        width, height = image.size
    assert width <= 8000
    assert width > 4000


def test_export_rejects_empty_output(tmp_path, monkeypatch):
    def write_nothing(self, fname, **kwargs):
        Path(fname).write_bytes(b"")

    monkeypatch.setattr(Figure, "savefig", write_nothing)
    with pytest.raises(RenderError):
        export_figure(_base_spec(), tmp_path / "empty.png")
