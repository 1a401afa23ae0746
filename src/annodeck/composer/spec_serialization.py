"""FigureSpec serialization helpers."""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict

from annodeck.errors import SpecError

from .specs import AnnotationSpec, AxesSpec, DataSpec, FigureSpec, LayerSpec, PageSpec

SPEC_VERSION = 1


def _filter_kwargs(cls, raw: Dict[str, Any] | None) -> Dict[str, Any]:
    """Drop unknown keys so older files load after we add fields."""
    if raw is None:
        return {}
    valid = {f.name for f in fields(cls)}
    return {k: v for k, v in raw.items() if k in valid}


def _range(value: Any):
    return tuple(value) if value else None


def figure_spec_to_dict(spec: FigureSpec) -> dict[str, Any]:
    data = asdict(spec)
    # effective_* sizes are build outputs, not inputs.
    data["page"].pop("effective_width_in", None)
    data["page"].pop("effective_height_in", None)
    for key in ("x_range", "y_range"):
        if data["axes"][key] is not None:
            data["axes"][key] = list(data["axes"][key])
    data["spec_version"] = SPEC_VERSION
    return data


def data_spec_from_dict(raw: Dict[str, Any] | None) -> DataSpec | None:
    if raw is None:
        return None
    if "dataset" not in raw:
        raise SpecError("data section needs a 'dataset'")
    return DataSpec(**_filter_kwargs(DataSpec, raw))


def annotation_spec_from_dict(raw: Dict[str, Any]) -> AnnotationSpec:
    kwargs = _filter_kwargs(AnnotationSpec, raw)
    if "kind" not in kwargs:
        raise SpecError("annotation needs a 'kind'")
    kwargs["data"] = data_spec_from_dict(raw.get("data"))
    return AnnotationSpec(**kwargs)


def figure_spec_from_dict(raw: dict[str, Any]) -> FigureSpec:
    raw = dict(raw)
    version = raw.pop("spec_version", SPEC_VERSION)
    if version > SPEC_VERSION:
        raise SpecError(f"Figure spec version {version} is newer than supported ({SPEC_VERSION})")

    data = data_spec_from_dict(raw.get("data"))
    if data is None:
        raise SpecError("figure needs a 'data' section")

    page = PageSpec(**_filter_kwargs(PageSpec, raw.get("page")))
    page.effective_width_in = None
    page.effective_height_in = None

    axes_kwargs = _filter_kwargs(AxesSpec, raw.get("axes"))
    for key in ("x_range", "y_range"):
        if key in axes_kwargs:
            axes_kwargs[key] = _range(axes_kwargs[key])
    axes = AxesSpec(**axes_kwargs)

    layers = []
    for layer_raw in raw.get("layers", []) or []:
        kwargs = _filter_kwargs(LayerSpec, layer_raw)
        if "geom" not in kwargs or "x" not in kwargs:
            raise SpecError("layer needs 'geom' and 'x'")
        layers.append(LayerSpec(**kwargs))

    annotations = [annotation_spec_from_dict(a) for a in raw.get("annotations", []) or []]

    spec = FigureSpec(data=data, page=page, axes=axes, layers=layers, annotations=annotations)
    if raw.get("template_id"):
        spec.template_id = raw["template_id"]
    return spec


def save_figure_spec(path: str | Path, spec: FigureSpec) -> None:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(figure_spec_to_dict(spec), f, indent=2)


def load_figure_spec(path: str | Path) -> FigureSpec:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return figure_spec_from_dict(raw)
