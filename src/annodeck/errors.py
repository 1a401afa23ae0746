# AnnoDeck
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Exception types raised by AnnoDeck."""

from __future__ import annotations

__all__ = ["AnnoDeckError", "SpecError", "DatasetNotFoundError", "RenderError"]


class AnnoDeckError(Exception):
    """Base class for errors raised by this package."""


class SpecError(AnnoDeckError, ValueError):
    """A figure, annotation or deck definition is malformed."""


class DatasetNotFoundError(AnnoDeckError, KeyError):
    """Requested dataset is not bundled."""


class RenderError(AnnoDeckError, RuntimeError):
    """A figure could not be written to disk."""
