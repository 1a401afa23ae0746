# AnnoDeck
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Central definition for application defaults and their overrides."""

from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Final, Mapping

log = logging.getLogger(__name__)

APP_NAME: Final[str] = "AnnoDeck"
APP_VERSION: Final[str] = "1.0.0"

ENV_PREFIX: Final[str] = "ANNODECK_"

# Keys whose default is None still parse to a number.
_FLOAT_KEYS: Final[frozenset[str]] = frozenset({"dpi"})

DEFAULTS: dict[str, Any] = {
    "template_id": None,  # None keeps each slide's own template
    "dpi": None,  # None keeps each slide's own dpi
    "formats": ["html", "md"],
    "output_dir": "build",
    "embed_images": False,
    "log_level": "INFO",
    "log_dir": None,
}


def _coerce(key: str, raw: str) -> Any:
    """Convert an environment string to the type of the default for ``key``."""
    default = DEFAULTS.get(key)
    if key in _FLOAT_KEYS:
        return float(raw)
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, list):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return raw


def load_config(
    path: str | Path | None = None, environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """
    Return the effective configuration.

    Precedence (lowest first): ``DEFAULTS``, the JSON file at ``path``,
    ``ANNODECK_<KEY>`` environment variables. Unknown keys in the file are
    ignored with a warning.
    """
    config = deepcopy(DEFAULTS)

    if path is not None:
        with Path(path).open("r", encoding="utf-8") as f:
            raw = json.load(f)
        for key, value in raw.items():
            if key not in DEFAULTS:
                log.warning("Ignoring unknown config key %r in %s", key, path)
                continue
            config[key] = value

    env = os.environ if environ is None else environ
    for key in DEFAULTS:
        env_key = ENV_PREFIX + key.upper()
        if env_key in env:
            config[key] = _coerce(key, env[env_key])
            log.debug("Config %s overridden from %s", key, env_key)

    return config
