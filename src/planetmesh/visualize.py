"""Matplotlib previews — meshes and hashed shape samples.

Functions
---------
- :func:`render_mesh` — ``plot_trisurf`` view coloured by radial height (PNG)
- :func:`render_hash_points` — scatter of sample points coloured by hash (PNG)

Both render off-screen through the ``Agg`` backend; no display is needed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Tuple, Union

import numpy as np

from .models import MeshData

PathLike = Union[str, Path]


def _ensure_mpl():
    """Lazy-import matplotlib; raise helpful error if missing."""
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        return plt
    except ImportError as exc:
        raise RuntimeError(
            "matplotlib is required for visualisation. "
            "Install with `pip install matplotlib`."
        ) from exc


def _save(fig, plt, out_path: PathLike) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, bbox_inches="tight")
    plt.close(fig)
    return out


def render_mesh(
    mesh: MeshData,
    out_path: PathLike,
    *,
    cmap: str = "terrain",
    figsize: Tuple[float, float] = (8, 8),
    dpi: int = 120,
    elev: float = 20.0,
    azim: float = -60.0,
) -> Path:
    """Render *mesh* in 3-D, faces coloured by their mean radius.

    Engine Y-up coordinates are shown with matplotlib's Z axis up.
    Returns the output file path.
    """
    plt = _ensure_mpl()

    # swap to z-up for display
    p = mesh.positions[:, [0, 2, 1]]
    tri = mesh.triangles
    radius = np.linalg.norm(mesh.positions, axis=1)

    fig = plt.figure(figsize=figsize, dpi=dpi)
    ax = fig.add_subplot(111, projection="3d")
    surface = ax.plot_trisurf(
        p[:, 0], p[:, 1], p[:, 2],
        triangles=tri,
        cmap=cmap,
        linewidth=0.1,
        edgecolor=(0.15, 0.15, 0.15, 0.3),
    )
    surface.set_array(radius[tri].mean(axis=1))

    r = float(radius.max()) * 1.1 if len(radius) else 1.0
    ax.set_xlim(-r, r)
    ax.set_ylim(-r, r)
    ax.set_zlim(-r, r)
    ax.set_box_aspect([1, 1, 1])
    ax.view_init(elev=elev, azim=azim)
    ax.set_axis_off()
    ax.set_title(
        f"{mesh.name} ({mesh.vertex_count} vertices, {mesh.triangle_count} triangles)",
        fontsize=11,
    )
    return _save(fig, plt, out_path)


def render_hash_points(
    positions: np.ndarray,
    hashes: np.ndarray,
    out_path: PathLike,
    *,
    point_size: float = 6.0,
    figsize: Tuple[float, float] = (8, 8),
    dpi: int = 120,
) -> Path:
    """Scatter *positions* with a grey level taken from each hash's low byte."""
    plt = _ensure_mpl()

    p = np.asarray(positions, dtype=np.float64)[:, [0, 2, 1]]
    shade = (np.asarray(hashes, dtype=np.uint32) & np.uint32(0xFF)) / 255.0

    fig = plt.figure(figsize=figsize, dpi=dpi)
    ax = fig.add_subplot(111, projection="3d")
    ax.scatter(p[:, 0], p[:, 1], p[:, 2], c=shade, cmap="gray", vmin=0.0, vmax=1.0, s=point_size)
    ax.set_box_aspect([1, 1, 1])
    ax.set_axis_off()
    ax.set_title(f"Hashed samples ({len(p)} points)", fontsize=11)
    return _save(fig, plt, out_path)
