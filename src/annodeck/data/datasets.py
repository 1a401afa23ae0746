# AnnoDeck
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Bundled example tables used by the slides.

``mtcars`` ships as CSV package data. ``geyser``, ``heights`` and ``climate``
are generated from fixed seeds so every render of the deck draws the same
points.
"""

from __future__ import annotations

import logging
from importlib import resources
from typing import TYPE_CHECKING, Callable, Dict

import numpy as np
import pandas as pd

from annodeck.errors import DatasetNotFoundError

if TYPE_CHECKING:
    from annodeck.composer.specs import DataSpec

log = logging.getLogger(__name__)

__all__ = ["list_datasets", "load_dataset", "group_summary", "resolve_data"]

_GEYSER_SEED = 1872
_HEIGHTS_SEED = 2016
_CLIMATE_SEED = 1951


def _mtcars() -> pd.DataFrame:
    with resources.files("annodeck.data").joinpath("mtcars.csv").open("r", encoding="utf-8") as f:
        return pd.read_csv(f)


def _geyser() -> pd.DataFrame:
    """Eruption duration and waiting time (minutes) for 272 eruptions."""
    rng = np.random.default_rng(_GEYSER_SEED)
    n = 272
    long_mode = rng.random(n) < 0.64
    eruptions = np.where(long_mode, rng.normal(4.29, 0.41, n), rng.normal(2.04, 0.27, n))
    waiting = np.where(long_mode, rng.normal(80.0, 5.9, n), rng.normal(54.5, 5.9, n))
    eruptions = np.round(np.clip(eruptions, 1.6, 5.1), 3)
    return pd.DataFrame(
        {
            "eruptions": eruptions,
            "waiting": np.round(np.clip(waiting, 43, 96)).astype(int),
            "kind": np.where(eruptions > 3.0, "long", "short"),
        }
    )


def _heights() -> pd.DataFrame:
    """Self-reported height (in) and weight (lb) by sex."""
    rng = np.random.default_rng(_HEIGHTS_SEED)
    n = 200
    male = rng.random(n) < 0.55
    height = np.where(male, rng.normal(69.5, 3.2, n), rng.normal(64.5, 3.0, n))
    weight = -200.0 + 5.2 * height + rng.normal(0.0, 18.0, n)
    return pd.DataFrame(
        {
            "sex": np.where(male, "Male", "Female"),
            "height": np.round(height, 1),
            "weight": np.round(weight, 1),
        }
    )


def _climate() -> pd.DataFrame:
    """Annual global temperature anomaly (deg C vs. the 1951-1980 mean)."""
    rng = np.random.default_rng(_CLIMATE_SEED)
    year = np.arange(1880, 2021)
    trend = 0.0000625 * (year - 1880) ** 2 - 0.3
    anomaly = trend + rng.normal(0.0, 0.1, year.size)
    return pd.DataFrame({"year": year, "anomaly": np.round(anomaly, 2)})


_LOADERS: Dict[str, Callable[[], pd.DataFrame]] = {
    "geyser": _geyser,
    "mtcars": _mtcars,
    "heights": _heights,
    "climate": _climate,
}


def list_datasets() -> list[str]:
    return sorted(_LOADERS)


def load_dataset(name: str) -> pd.DataFrame:
    """Return a fresh copy of the bundled table ``name``."""
    try:
        loader = _LOADERS[name]
    except KeyError:
        raise DatasetNotFoundError(
            f"Unknown dataset {name!r}; available: {', '.join(list_datasets())}"
        ) from None
    df = loader()
    log.debug("Loaded dataset %s (%d rows)", name, len(df))
    return df


def group_summary(df: pd.DataFrame, by: str, column: str, stat: str = "mean") -> pd.DataFrame:
    """Aggregate ``column`` per level of ``by`` (e.g. mean height per sex)."""
    return df.groupby(by, as_index=False, sort=True)[column].agg(stat)


def resolve_data(spec: "DataSpec") -> pd.DataFrame:
    """Load ``spec.dataset`` and apply its derived columns, filter and summary."""
    df = load_dataset(spec.dataset)
    for column, expr in (spec.mutate or {}).items():
        df[column] = df.eval(expr)
    if spec.query:
        df = df.query(spec.query).reset_index(drop=True)
    if spec.summary_by and spec.summary_column:
        df = group_summary(df, spec.summary_by, spec.summary_column, spec.summary_stat)
    return df
