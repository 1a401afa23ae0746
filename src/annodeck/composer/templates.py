"""Data-only page templates for slide charts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_TEMPLATE_ID = "slide"


@dataclass(frozen=True)
class TemplatePreset:
    """Physical layout + style defaults for a template."""

    layout_defaults: Dict[str, Any]
    style_defaults: Dict[str, Any]


_TEMPLATES: Dict[str, TemplatePreset] = {
    "slide": TemplatePreset(
        layout_defaults={
            "width_in": 10.0,
            "height_in": 5.625,  # 16:9
            "min_margin_in": 0.25,
        },
        style_defaults={
            "xlabel_fontsize": 14.0,
            "ylabel_fontsize": 14.0,
            "tick_label_fontsize": 12.0,
            "title_fontsize": 16.0,
            "legend_fontsize": 12.0,
        },
    ),
    "slide_square": TemplatePreset(
        layout_defaults={
            "width_in": 6.0,
            "height_in": 6.0,
            "min_margin_in": 0.25,
        },
        style_defaults={
            "xlabel_fontsize": 13.0,
            "ylabel_fontsize": 13.0,
            "tick_label_fontsize": 11.0,
            "title_fontsize": 15.0,
            "legend_fontsize": 11.0,
        },
    ),
    "handout": TemplatePreset(
        layout_defaults={
            "width_in": 7.0,
            "height_in": 4.2,
            "min_margin_in": 0.2,
        },
        style_defaults={
            "xlabel_fontsize": 10.0,
            "ylabel_fontsize": 10.0,
            "tick_label_fontsize": 8.0,
            "title_fontsize": 11.0,
            "legend_fontsize": 8.0,
        },
    ),
}


def list_templates() -> list[str]:
    return sorted(_TEMPLATES)


def get_template_preset(template_id: str) -> TemplatePreset:
    """Return the preset for template_id (fallback to default)."""
    return _TEMPLATES.get(template_id, _TEMPLATES[DEFAULT_TEMPLATE_ID])


def apply_template_preset(
    fig_spec: Any,
    template_id: str,
    previous_defaults: Dict[str, Dict[str, Any]] | None = None,
    *,
    respect_overrides: bool = True,
) -> Dict[str, Dict[str, Any]]:
    """
    Apply template defaults to the given FigureSpec in-place.

    A field is updated unless `respect_overrides` is True and its current value
    differs from the previous defaults (differing values are user overrides).
    Axes font sizes left as None always take the template value.

    Returns the defaults used so callers can pass them to the next switch.
    """
    preset = get_template_preset(template_id)
    prev = previous_defaults or {"page": {}, "axes": {}}

    def _apply_section(obj: Any, defaults: Dict[str, Any], section: str) -> None:
        for name, new_val in defaults.items():
            current = getattr(obj, name, None)
            should_apply = not respect_overrides
            if respect_overrides:
                if current is None:
                    should_apply = True
                elif section in prev and prev[section].get(name) == current:
                    should_apply = True
            if should_apply:
                setattr(obj, name, new_val)

    _apply_section(fig_spec.page, preset.layout_defaults, "page")
    _apply_section(fig_spec.axes, preset.style_defaults, "axes")
    fig_spec.template_id = template_id if template_id in _TEMPLATES else DEFAULT_TEMPLATE_ID

    return {
        "page": dict(preset.layout_defaults),
        "axes": dict(preset.style_defaults),
    }
