"""planetmesh — procedural sphere meshes and rocky planet terrain.

Public API is organised into layers:

- **Core** — mesh records, parameters, exceptions
- **Hashing & noise** — seeded hash, fractal/ridged noise, terrain heights
- **Topology** — octahedron and cube grid generators
- **Pipeline** — staged mesh generation and the public generators
- **Shapes** — parametric sample shapes for previews
- **I/O & diagnostics** — JSON configs/exports, mesh checks
- **Rendering** — matplotlib previews (imported on demand)
"""

# ── Core ────────────────────────────────────────────────────────────
from .exceptions import BufferSizeError, DegenerateGeometryError, PlanetMeshError
from .models import (
    BoxCollider,
    CapsuleCollider,
    MeshData,
    SphereCollider,
    TopologyParams,
)

# ── Hashing & noise ─────────────────────────────────────────────────
from .hashing import (
    SmallXXHash,
    SmallXXHash4,
    hash_eat,
    hash_finalize,
    hash_points,
    hash_seed,
)
from .noise import (
    FractalNoiseSettings,
    RidgeNoiseSettings,
    fractal_noise,
    ridged_noise,
    smooth_max,
    smoothed_ridged_noise,
    smoothstep,
)
from .terrain import (
    ARCHIPELAGO,
    BARREN_MOON,
    EARTHLIKE,
    FLAT,
    TerrainConfig,
    rocky_planet_height,
)

# ── Topology ────────────────────────────────────────────────────────
from .octahedron import generate_octahedron
from .cube_sphere import cube_triangles, cube_vertex_count

# ── Pipeline ────────────────────────────────────────────────────────
from .pipeline import (
    ConcurrentStages,
    GenerationConfig,
    MeshPipeline,
    MeshStage,
    PipelineResult,
    VertexBuffer,
    map_batches,
)
from .generators import (
    generate_cube_sphere,
    generate_octahedron_sphere,
    generate_rocky_planet,
    generate_rounded_box,
)

# ── Shapes ──────────────────────────────────────────────────────────
from .shapes import Plane, SpaceTRS, Sphere, Torus, sample_shape

# ── I/O & diagnostics ───────────────────────────────────────────────
from .io import (
    export_mesh_json,
    load_terrain_config,
    mesh_payload,
    save_terrain_config,
)
from .diagnostics import is_closed_manifold, max_radius_error, mesh_report

__all__ = [
    # Core
    "PlanetMeshError",
    "DegenerateGeometryError",
    "BufferSizeError",
    "MeshData",
    "TopologyParams",
    "SphereCollider",
    "BoxCollider",
    "CapsuleCollider",
    # Hashing & noise
    "SmallXXHash",
    "SmallXXHash4",
    "hash_seed",
    "hash_eat",
    "hash_finalize",
    "hash_points",
    "FractalNoiseSettings",
    "RidgeNoiseSettings",
    "fractal_noise",
    "ridged_noise",
    "smoothed_ridged_noise",
    "smooth_max",
    "smoothstep",
    "TerrainConfig",
    "EARTHLIKE",
    "ARCHIPELAGO",
    "BARREN_MOON",
    "FLAT",
    "rocky_planet_height",
    # Topology
    "generate_octahedron",
    "cube_triangles",
    "cube_vertex_count",
    # Pipeline
    "GenerationConfig",
    "VertexBuffer",
    "MeshStage",
    "ConcurrentStages",
    "MeshPipeline",
    "PipelineResult",
    "map_batches",
    "generate_octahedron_sphere",
    "generate_cube_sphere",
    "generate_rounded_box",
    "generate_rocky_planet",
    # Shapes
    "Plane",
    "Sphere",
    "Torus",
    "SpaceTRS",
    "sample_shape",
    # I/O & diagnostics
    "load_terrain_config",
    "save_terrain_config",
    "mesh_payload",
    "export_mesh_json",
    "is_closed_manifold",
    "max_radius_error",
    "mesh_report",
]
