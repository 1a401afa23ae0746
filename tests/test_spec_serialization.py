import json

import pytest

from annodeck.composer.spec_serialization import (
    SPEC_VERSION,
    figure_spec_from_dict,
    figure_spec_to_dict,
    load_figure_spec,
    save_figure_spec,
)
from annodeck.composer.specs import AnnotationSpec, AxesSpec, DataSpec, FigureSpec, LayerSpec
from annodeck.errors import SpecError


def _spec() -> FigureSpec:
    return FigureSpec(
        data=DataSpec("heights", query="height > 60"),
        axes=AxesSpec(xlabel="Height", x_range=(55.0, 80.0)),
        layers=[LayerSpec("histogram", x="height", color_by="sex")],
        annotations=[
            AnnotationSpec(
                "vline",
                data=DataSpec("heights", summary_by="sex", summary_column="height"),
                x_column="height",
                group_column="sex",
            ),
            AnnotationSpec("text", text="peak", x=66.0, y=12.0),
        ],
    )


def test_dict_form_is_json_ready():
    spec = _spec()
    spec.page.effective_width_in = 9.0
    data = figure_spec_to_dict(spec)
    assert data["spec_version"] == SPEC_VERSION
    assert "effective_width_in" not in data["page"]
    assert data["axes"]["x_range"] == [55.0, 80.0]
    assert data["annotations"][0]["data"]["summary_by"] == "sex"
    json.dumps(data)


def test_nested_data_and_ranges_restored():
    restored = figure_spec_from_dict(figure_spec_to_dict(_spec()))
    assert restored.axes.x_range == (55.0, 80.0)
    assert isinstance(restored.annotations[0].data, DataSpec)
    assert restored.annotations[0].data.summary_column == "height"
    assert restored.annotations[1].data is None
    assert restored == _spec()


def test_unknown_keys_are_ignored():
    data = figure_spec_to_dict(_spec())
    data["page"]["bleed_in"] = 0.1
    data["annotations"][1]["sparkle"] = True
    restored = figure_spec_from_dict(data)
    assert restored.annotations[1].text == "peak"


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("data"),
        lambda d: d["data"].pop("dataset"),
        lambda d: d["layers"][0].pop("geom"),
        lambda d: d["annotations"][0].pop("kind"),
        lambda d: d.update(spec_version=SPEC_VERSION + 1),
    ],
)
def test_invalid_dicts_raise(mutate):
    data = figure_spec_to_dict(_spec())
    mutate(data)
    with pytest.raises(SpecError):
        figure_spec_from_dict(data)


def test_file_helpers(tmp_path):
    path = tmp_path / "figure.json"
    save_figure_spec(path, _spec())
    assert load_figure_spec(path) == _spec()
