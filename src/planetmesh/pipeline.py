"""Mesh pipeline — ordered stages over one vertex buffer.

Provides :class:`MeshStage` (protocol) and :class:`MeshPipeline`
(sequencer) so that the stages of sphere generation can be declared in
order and run as a single pipeline::

    topology → project → (uv ‖ tangent) → height → recalculate-normals → scale

Each stage takes ownership of a :class:`VertexBuffer` and hands a new
one to the next stage; arrays of the incoming buffer are never written.
Stages whose inputs are ready can run side by side in
:class:`ConcurrentStages`, which joins them before the pipeline moves on.

Usage
-----
>>> from planetmesh.pipeline import GenerationConfig, MeshPipeline
>>> mesh = MeshPipeline.default().build(GenerationConfig(subdivisions=3, radius=2.0))
"""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import (
    Callable,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

import numpy as np

from .cube_sphere import (
    check_sizes,
    cube_grid_coordinates,
    cube_triangles,
    grid_colors,
    squared_sphere_points,
)
from .exceptions import DegenerateGeometryError
from .models import MeshData, SphereCollider, TopologyParams, check_radius
from .octahedron import (
    generate_octahedron,
    normalize_vertices,
    octahedron_tangents,
    spherical_uv,
)
from .terrain import TerrainConfig, displace, rocky_planet_height

logger = logging.getLogger(__name__)

TOPOLOGIES = ("octahedron", "cube")


# ═══════════════════════════════════════════════════════════════════
# Configuration and buffer
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class GenerationConfig:
    """Everything one :meth:`MeshPipeline.build` call needs.

    Attributes
    ----------
    topology : str
        ``"octahedron"`` or ``"cube"``.
    subdivisions : int
        Octahedron subdivision level, clamped to ``[0, 6]``.
    grid_size : int
        Cube grid resolution per edge.
    radius : float
        Sphere radius (must be positive).
    terrain : TerrainConfig, optional
        When set, the height stage displaces vertices to
        ``radius + height``.
    workers : int
        Threads used by batched per-vertex stages.
    batch_size : int
        Vertices per batch in :func:`map_batches`.
    name : str, optional
        Mesh name; derived from the topology when omitted.
    """

    topology: str = "octahedron"
    subdivisions: int = 0
    grid_size: int = 1
    radius: float = 1.0
    terrain: Optional[TerrainConfig] = None
    workers: int = 1
    batch_size: int = 4096
    name: Optional[str] = None

    def validated(self) -> "GenerationConfig":
        """Return a copy with clamped subdivisions, or raise on degenerate input."""
        if self.topology not in TOPOLOGIES:
            raise DegenerateGeometryError(
                f"Unknown topology {self.topology!r}. Available: {list(TOPOLOGIES)}"
            )
        if self.workers < 1 or self.batch_size < 1:
            raise DegenerateGeometryError("workers and batch_size must be >= 1")
        radius = check_radius(self.radius)
        if self.topology == "cube":
            check_sizes(self.grid_size, self.grid_size, self.grid_size)
            return replace(self, radius=radius)
        label = "Planet" if self.terrain is not None else "Octahedron sphere"
        params = TopologyParams.create(self.subdivisions, radius, label=label)
        return replace(self, subdivisions=params.subdivisions, radius=radius)


@dataclass(frozen=True, eq=False)
class VertexBuffer:
    """Intermediate buffers passed from stage to stage."""

    positions: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    submeshes: Tuple[np.ndarray, ...] = ()
    normals: Optional[np.ndarray] = None
    uvs: Optional[np.ndarray] = None
    tangents: Optional[np.ndarray] = None
    colors: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self.positions)


# ═══════════════════════════════════════════════════════════════════
# Batched maps
# ═══════════════════════════════════════════════════════════════════

def map_batches(
    fn: Callable[[int, int], np.ndarray],
    count: int,
    *,
    workers: int = 1,
    batch_size: int = 4096,
) -> np.ndarray:
    """Evaluate ``fn(start, stop)`` over ``[0, count)`` in index batches.

    Batches run on a thread pool when *workers* > 1; results are
    concatenated in index order, so the output does not depend on
    *workers*.  Returns only after every batch has finished.
    """
    ranges = [(s, min(s + batch_size, count)) for s in range(0, count, batch_size)]
    if not ranges:
        return np.zeros(0)
    if workers == 1 or len(ranges) == 1:
        parts = [fn(start, stop) for start, stop in ranges]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            parts = list(executor.map(lambda r: fn(*r), ranges))
    return np.concatenate(parts)


# ═══════════════════════════════════════════════════════════════════
# MeshStage protocol
# ═══════════════════════════════════════════════════════════════════


@runtime_checkable
class MeshStage(Protocol):
    """Protocol for a pipeline stage.

    A stage receives the buffer produced by its predecessor and returns
    the buffer for its successor.  *produces* lists the buffer fields it
    writes, which :class:`ConcurrentStages` uses to merge results.
    """

    @property
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @property
    def produces(self) -> Tuple[str, ...]:
        ...

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        ...


# ═══════════════════════════════════════════════════════════════════
# Built-in stages
# ═══════════════════════════════════════════════════════════════════


class TopologyStage:
    """Raw vertices and index sets for the configured topology.

    Octahedron positions are un-normalized lerps; cube positions are
    integer grid coordinates (also kept as RGBA colours).
    """

    name = "topology"
    produces = ("positions", "submeshes", "colors")

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        if config.topology == "cube":
            size = config.grid_size
            coords = cube_grid_coordinates(size, size, size)
            return replace(
                buffer,
                positions=coords.astype(np.float64),
                submeshes=cube_triangles(size, size, size),
                colors=grid_colors(coords),
            )
        params = TopologyParams(config.subdivisions, config.radius)
        vertices, triangles = generate_octahedron(params)
        return replace(buffer, positions=vertices, submeshes=(triangles,))


class ProjectStage:
    """Project onto the unit sphere; normals equal the projected positions.

    Octahedra are normalized, cube grids use the squaring correction.
    """

    name = "project"
    produces = ("positions", "normals")

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        if config.topology == "cube":
            positions = squared_sphere_points(buffer.positions, config.grid_size)
        else:
            positions = normalize_vertices(buffer.positions)
        return replace(buffer, positions=positions, normals=positions.copy())


class UVStage:
    name = "uv"
    produces = ("uvs",)

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        uvs = spherical_uv(buffer.positions, fix_seam=config.topology == "octahedron")
        return replace(buffer, uvs=uvs)


class TangentStage:
    """Octahedron tangents; cube spheres carry none."""

    name = "tangent"
    produces = ("tangents",)

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        if config.topology != "octahedron":
            return buffer
        return replace(buffer, tangents=octahedron_tangents(buffer.positions))


class HeightStage:
    """Displace unit-sphere vertices by the rocky planet height field."""

    name = "height"
    produces = ("positions",)

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        terrain = config.terrain
        if terrain is None:
            return buffer
        unit = buffer.positions

        def heights(start: int, stop: int) -> np.ndarray:
            return np.array(
                [rocky_planet_height(unit[i], terrain) for i in range(start, stop)],
                dtype=np.float64,
            )

        h = map_batches(
            heights, len(unit), workers=config.workers, batch_size=config.batch_size
        )
        return replace(buffer, positions=displace(unit, h, config.radius))


class RecalculateNormalsStage:
    """Area-weighted vertex normals of a displaced surface."""

    name = "recalculate-normals"
    produces = ("normals",)

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        if config.terrain is None:
            return buffer
        return replace(buffer, normals=vertex_normals(buffer.positions, buffer.submeshes))


class ScaleStage:
    """Uniform scale to *radius*; skipped when radius ≈ 1 or already displaced."""

    name = "scale"
    produces = ("positions",)

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        if config.terrain is not None or math.isclose(config.radius, 1.0, rel_tol=0.0, abs_tol=1e-12):
            return buffer
        return replace(buffer, positions=buffer.positions * config.radius)


def vertex_normals(positions: np.ndarray, submeshes: Sequence[np.ndarray]) -> np.ndarray:
    """Sum un-normalized face normals onto their vertices and normalize."""
    normals = np.zeros_like(positions)
    for indices in submeshes:
        tri = indices.reshape(-1, 3)
        a, b, c = positions[tri[:, 0]], positions[tri[:, 1]], positions[tri[:, 2]]
        face = np.cross(b - a, c - a)
        for k in range(3):
            np.add.at(normals, tri[:, k], face)
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    return normals / np.where(lengths > 0.0, lengths, 1.0)


@dataclass
class ConcurrentStages:
    """Run independent stages on the same input, then join them.

    Every stage sees the incoming buffer; afterwards the fields each one
    *produces* are merged into a single output buffer.  No stage after
    this group starts before all members have finished.
    """

    stages: List[MeshStage]
    workers: int = 2

    @property
    def name(self) -> str:
        return "+".join(s.name for s in self.stages)

    @property
    def produces(self) -> Tuple[str, ...]:
        return tuple(f for s in self.stages for f in s.produces)

    def __call__(self, buffer: VertexBuffer, config: GenerationConfig) -> VertexBuffer:
        with ThreadPoolExecutor(max_workers=max(1, self.workers)) as executor:
            futures = [executor.submit(stage, buffer, config) for stage in self.stages]
            results = [f.result() for f in futures]

        merged: Dict[str, object] = {}
        for stage, result in zip(self.stages, results):
            for name in stage.produces:
                merged[name] = getattr(result, name)
        return replace(buffer, **merged)


# ═══════════════════════════════════════════════════════════════════
# MeshPipeline
# ═══════════════════════════════════════════════════════════════════

Hook = Callable[[str, int, int], None]
"""Signature for before/after hooks: ``(stage_name, stage_index, total_stages)``."""


@dataclass
class PipelineResult:
    """Final buffer plus per-stage wall-clock seconds."""

    buffer: VertexBuffer
    config: GenerationConfig
    elapsed: Dict[str, float] = field(default_factory=dict)


class MeshPipeline:
    """Ordered sequence of :class:`MeshStage` instances.

    Parameters
    ----------
    stages : list[MeshStage]
        Stages to execute in order.
    before : Hook | None
        Called *before* each stage.
    after : Hook | None
        Called *after* each stage.

    Usage::

        pipe = MeshPipeline([TopologyStage(), ProjectStage()])
        mesh = pipe.build(GenerationConfig(subdivisions=2))
    """

    def __init__(
        self,
        stages: Optional[List[MeshStage]] = None,
        *,
        before: Optional[Hook] = None,
        after: Optional[Hook] = None,
    ) -> None:
        self._stages: List[MeshStage] = list(stages or [])
        self._before = before
        self._after = after

    @classmethod
    def default(cls, **hooks) -> "MeshPipeline":
        """The full chain used by every public sphere generator."""
        return cls(
            [
                TopologyStage(),
                ProjectStage(),
                ConcurrentStages([UVStage(), TangentStage()]),
                HeightStage(),
                RecalculateNormalsStage(),
                ScaleStage(),
            ],
            **hooks,
        )

    # ── mutation ────────────────────────────────────────────────────

    def add(self, stage: MeshStage) -> "MeshPipeline":
        """Append a stage and return *self* for chaining."""
        self._stages.append(stage)
        return self

    def insert(self, index: int, stage: MeshStage) -> "MeshPipeline":
        """Insert a stage at *index* and return *self* for chaining."""
        self._stages.insert(index, stage)
        return self

    # ── execution ───────────────────────────────────────────────────

    def run(self, config: GenerationConfig) -> PipelineResult:
        """Validate *config* and execute all stages in order."""
        config = config.validated()
        buffer = VertexBuffer()
        elapsed: Dict[str, float] = {}
        total = len(self._stages)

        for idx, stage in enumerate(self._stages):
            sname = stage.name
            if self._before:
                self._before(sname, idx, total)

            t0 = time.perf_counter()
            buffer = stage(buffer, config)
            dt = time.perf_counter() - t0

            elapsed[sname] = dt
            logger.debug("Stage %s finished in %.4fs (%d vertices)", sname, dt, len(buffer))

            if self._after:
                self._after(sname, idx, total)

        return PipelineResult(buffer=buffer, config=config, elapsed=elapsed)

    def build(self, config: GenerationConfig) -> MeshData:
        """Run the pipeline and package the final buffer as :class:`MeshData`."""
        result = self.run(config)
        return to_mesh_data(result.buffer, result.config)

    # ── introspection ───────────────────────────────────────────────

    @property
    def step_names(self) -> List[str]:
        """Ordered list of stage names."""
        return [s.name for s in self._stages]

    def __len__(self) -> int:
        return len(self._stages)

    def __repr__(self) -> str:
        names = ", ".join(self.step_names)
        return f"MeshPipeline([{names}])"


def _default_name(config: GenerationConfig) -> str:
    if config.topology == "cube":
        return "Procedural Sphere"
    if config.terrain is not None:
        return "Planet"
    return f"Octahedron Sphere §{config.subdivisions}"


def to_mesh_data(buffer: VertexBuffer, config: GenerationConfig) -> MeshData:
    """Package a finished buffer; fills missing normals/UVs with zeros."""
    n = len(buffer)
    return MeshData(
        name=config.name or _default_name(config),
        positions=buffer.positions,
        normals=buffer.normals if buffer.normals is not None else np.zeros((n, 3)),
        uvs=buffer.uvs if buffer.uvs is not None else np.zeros((n, 2)),
        submeshes=tuple(buffer.submeshes),
        tangents=buffer.tangents,
        colors=buffer.colors,
        colliders=(SphereCollider((0.0, 0.0, 0.0), config.radius),),
    )
