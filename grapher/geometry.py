"""Geometry buffers handed to the host renderer.

Each mesh is an immutable bundle of NumPy arrays: ``positions`` and
``normals`` are ``(N, 3)`` float64, ``indices`` is a 1-D unsigned integer
array whose width is an output option (16 or 32 bits) rather than a core
invariant. Meshes are rebuilt from scratch on every regeneration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import numpy as np

from .errors import IndexWidthError

__all__ = [
    "Topology",
    "Orientation",
    "index_array",
    "LineMesh",
    "RibbonMesh",
    "PolylineMesh",
    "GridMeshes",
]

Topology = Literal["line_list", "line_strip", "triangle_strip"]
Orientation = Literal["horizontal", "vertical"]

_INDEX_DTYPES = {16: np.uint16, 32: np.uint32}


def index_array(count: int, width: int = 32) -> np.ndarray:
    """Return indices ``0..count`` in an unsigned dtype of ``width`` bits.

    Raises
    ------
    ValueError
        If ``width`` is not 16 or 32.
    IndexWidthError
        If ``count`` vertices cannot be addressed with ``width`` bits.
    """
    try:
        dtype = _INDEX_DTYPES[width]
    except KeyError:
        raise ValueError(f"Unsupported index width: {width!r}; expected 16 or 32") from None
    limit = int(np.iinfo(dtype).max) + 1
    if count > limit:
        raise IndexWidthError(f"{count} vertices exceed the {width}-bit index range ({limit})")
    return np.arange(count, dtype=dtype)


@dataclass(frozen=True, eq=False)
class LineMesh:
    """Line-list geometry: every consecutive pair of vertices is one segment.

    ``orientations`` tags each segment; ``normals`` carries the shading hint
    ``(0, 1, 0)`` for horizontal and ``(1, 0, 0)`` for vertical segments.
    """

    tier: str
    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray
    orientations: tuple[Orientation, ...] = ()
    topology: Topology = field(default="line_list", init=False)

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def line_count(self) -> int:
        return self.vertex_count // 2

    def segments(self) -> np.ndarray:
        """Return segment endpoints as a ``(line_count, 2, 3)`` array."""
        return self.positions.reshape(-1, 2, 3)


@dataclass(frozen=True, eq=False)
class RibbonMesh:
    """Triangle-strip ribbon: two vertices per curve sample.

    ``centres`` holds the ``(R, 2)`` sample points the ribbon was built
    around, ``valid`` flags which of them came from finite evaluator output.
    """

    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray
    centres: np.ndarray
    valid: np.ndarray
    half_width: float
    topology: Topology = field(default="triangle_strip", init=False)

    @property
    def sample_count(self) -> int:
        return int(self.centres.shape[0])

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    def triangle_indices(self) -> np.ndarray:
        """Return the strip decomposed into explicit triangles, shape ``(T, 3)``.

        Quads touching an invalid sample are left out, so gaps in the
        evaluator's domain appear as gaps in the ribbon.
        """
        quad_ok = self.valid[:-1] & self.valid[1:]
        first = 2 * np.flatnonzero(quad_ok)
        tris = np.empty((2 * first.size, 3), dtype=self.indices.dtype)
        tris[0::2] = np.stack([first, first + 1, first + 2], axis=1)
        tris[1::2] = np.stack([first + 1, first + 3, first + 2], axis=1)
        return tris


@dataclass(frozen=True, eq=False)
class PolylineMesh:
    """Line-strip rendition of a curve, one vertex per sample."""

    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray
    valid: np.ndarray
    topology: Topology = field(default="line_strip", init=False)

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])


@dataclass(frozen=True, eq=False)
class GridMeshes:
    """The three grid tiers, from heaviest to lightest."""

    main: LineMesh
    mid: LineMesh
    minor: LineMesh

    def tiers(self) -> tuple[LineMesh, LineMesh, LineMesh]:
        return (self.main, self.mid, self.minor)
