"""Outline geometry for mark enclosures (ellipse, circle, rect, hull).

Shapes are computed in a scaled space where one unit is one inch on the
page, so padding is uniform and circles look round regardless of the axis
ranges. The outline is returned in data coordinates.
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from annodeck.errors import SpecError

from .specs import MARK_SHAPES

log = logging.getLogger(__name__)

__all__ = ["enclosure_polygon"]

_EPS = 1e-12


def enclosure_polygon(
    points: np.ndarray,
    shape: str,
    expand: float = 0.0,
    scale: Tuple[float, float] = (1.0, 1.0),
    n_points: int = 120,
) -> np.ndarray:
    """
    Return a closed outline (N, 2) enclosing every point.

    Args:
        points: (n, 2) array of x/y data coordinates
        shape: one of "ellipse", "circle", "rect", "hull"
        expand: padding added around the points, in scaled units (inches)
        scale: data units per scaled unit along x and y
        n_points: vertices used for curved outlines
    """
    if shape not in MARK_SHAPES:
        raise SpecError(f"Unknown mark shape {shape!r}; expected one of {MARK_SHAPES}")
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    pts = pts[np.isfinite(pts).all(axis=1)]
    if pts.shape[0] == 0:
        raise ValueError("Cannot enclose an empty set of points")

    sx, sy = (max(abs(float(s)), _EPS) for s in scale)
    scaled = pts / np.array([sx, sy])

    if shape == "ellipse":
        outline = _ellipse(scaled, expand, n_points)
    elif shape == "circle":
        outline = _circle(scaled, expand, n_points)
    elif shape == "hull":
        outline = _hull(scaled, expand)
    else:
        outline = None

    if outline is None:
        outline = _rect(scaled, expand)

    outline = np.vstack([outline, outline[:1]])
    return outline * np.array([sx, sy])


def _rect(pts: np.ndarray, expand: float) -> np.ndarray:
    x0, y0 = pts.min(axis=0) - expand
    x1, y1 = pts.max(axis=0) + expand
    return np.array([[x0, y0], [x1, y0], [x1, y1], [x0, y1]])


def _circle_points(n_points: int) -> np.ndarray:
    t = np.linspace(0.0, 2.0 * np.pi, n_points, endpoint=False)
    return np.column_stack([np.cos(t), np.sin(t)])


def _circle(pts: np.ndarray, expand: float, n_points: int) -> np.ndarray:
    center = pts.mean(axis=0)
    radius = float(np.max(np.linalg.norm(pts - center, axis=1))) + expand
    return center + radius * _circle_points(n_points)


def _ellipse(pts: np.ndarray, expand: float, n_points: int) -> np.ndarray | None:
    if pts.shape[0] < 3:
        log.debug("Ellipse needs 3+ points (got %d); using rect", pts.shape[0])
        return None
    center = pts.mean(axis=0)
    cov = np.cov(pts.T)
    if abs(np.linalg.det(cov)) < _EPS:
        log.debug("Collinear points; using rect instead of ellipse")
        return None
    # Scale the covariance ellipse until the farthest point lies on it.
    offsets = pts - center
    mahal = np.einsum("ij,jk,ik->i", offsets, np.linalg.inv(cov), offsets)
    k = float(np.sqrt(mahal.max()))
    eigvals, eigvecs = np.linalg.eigh(cov)
    radii = k * np.sqrt(np.clip(eigvals, 0.0, None)) + expand
    unit = _circle_points(n_points)
    return center + (unit * radii) @ eigvecs.T


def _hull(pts: np.ndarray, expand: float) -> np.ndarray | None:
    if pts.shape[0] < 3:
        return None
    try:
        hull = ConvexHull(pts)
    except QhullError:
        log.debug("Degenerate hull; using rect")
        return None
    vertices = pts[hull.vertices]
    if expand <= 0:
        return vertices
    # Rounded offset: hull of small circles placed on every vertex.
    ring = expand * _circle_points(24)
    padded = (vertices[:, None, :] + ring[None, :, :]).reshape(-1, 2)
    return padded[ConvexHull(padded).vertices]
