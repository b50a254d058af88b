"""JSON persistence — terrain configs in, mesh payloads out.

Functions
---------
- :func:`terrain_config_to_dict` / :func:`terrain_config_from_dict`
- :func:`save_terrain_config` / :func:`load_terrain_config` — validated
  against :data:`TERRAIN_CONFIG_SCHEMA` with ``jsonschema``
- :func:`mesh_payload` — JSON-serialisable description of a mesh
- :func:`export_mesh_json` — write the payload to a file
- :func:`validate_mesh_payload` — check a payload against
  :data:`MESH_PAYLOAD_SCHEMA`
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jsonschema

from .models import BoxCollider, CapsuleCollider, MeshData, SphereCollider
from .noise import FractalNoiseSettings, RidgeNoiseSettings
from .terrain import TerrainConfig

PathLike = Union[str, Path]

_EXPORT_VERSION = "1.0"


# ═══════════════════════════════════════════════════════════════════
# Schema
# ═══════════════════════════════════════════════════════════════════

_VEC3 = {
    "type": "array",
    "items": {"type": "number"},
    "minItems": 3,
    "maxItems": 3,
}

_FRACTAL_PROPERTIES: Dict[str, Any] = {
    "num_layers": {"type": "integer", "minimum": 0},
    "lacunarity": {"type": "number"},
    "persistence": {"type": "number"},
    "scale": {"type": "number"},
    "amplitude_multiplier": {"type": "number"},
    "vertical_shift": {"type": "number"},
    "offset": _VEC3,
    "seed": {"type": "integer"},
    "time": {"type": ["number", "null"]},
}

_FRACTAL_SCHEMA = {
    "type": "object",
    "properties": _FRACTAL_PROPERTIES,
    "additionalProperties": False,
}

_RIDGE_SCHEMA = {
    "type": "object",
    "properties": {
        **_FRACTAL_PROPERTIES,
        "power": {"type": "number"},
        "gain": {"type": "number"},
        "peak_smoothing": {"type": "number", "minimum": 0},
    },
    "additionalProperties": False,
}

TERRAIN_CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "planetmesh terrain config",
    "type": "object",
    "properties": {
        "continents": _FRACTAL_SCHEMA,
        "mountains": _RIDGE_SCHEMA,
        "mask": _FRACTAL_SCHEMA,
        "ocean_floor_depth": {"type": "number"},
        "ocean_depth_multiplier": {"type": "number"},
        "ocean_floor_smoothing": {"type": "number"},
        "mountain_blend": {"type": "number", "minimum": 0},
    },
    "additionalProperties": False,
}


# ═══════════════════════════════════════════════════════════════════
# Terrain configs
# ═══════════════════════════════════════════════════════════════════

def terrain_config_to_dict(config: TerrainConfig) -> Dict[str, Any]:
    data = asdict(config)
    for family in ("continents", "mountains", "mask"):
        data[family]["offset"] = list(data[family]["offset"])
    return data


def terrain_config_from_dict(data: Dict[str, Any]) -> TerrainConfig:
    """Build a :class:`TerrainConfig`; missing keys keep their defaults.

    Raises
    ------
    jsonschema.ValidationError
        If *data* does not match :data:`TERRAIN_CONFIG_SCHEMA`.
    """
    jsonschema.validate(instance=data, schema=TERRAIN_CONFIG_SCHEMA)

    def settings(cls, raw):
        raw = dict(raw)
        if "offset" in raw:
            raw["offset"] = tuple(float(c) for c in raw["offset"])
        return cls(**raw)

    kwargs: Dict[str, Any] = {
        key: value
        for key, value in data.items()
        if key not in ("continents", "mountains", "mask")
    }
    if "continents" in data:
        kwargs["continents"] = settings(FractalNoiseSettings, data["continents"])
    if "mountains" in data:
        kwargs["mountains"] = settings(RidgeNoiseSettings, data["mountains"])
    if "mask" in data:
        kwargs["mask"] = settings(FractalNoiseSettings, data["mask"])
    return TerrainConfig(**kwargs)


def save_terrain_config(config: TerrainConfig, path: PathLike) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(terrain_config_to_dict(config), indent=2), encoding="utf-8")
    return out


def load_terrain_config(path: PathLike) -> TerrainConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return terrain_config_from_dict(data)


# ═══════════════════════════════════════════════════════════════════
# Mesh export
# ═══════════════════════════════════════════════════════════════════

def _collider_entry(collider) -> Dict[str, Any]:
    if isinstance(collider, SphereCollider):
        return {"type": "sphere", "center": list(collider.center), "radius": collider.radius}
    if isinstance(collider, BoxCollider):
        return {"type": "box", "center": list(collider.center), "size": list(collider.size)}
    if isinstance(collider, CapsuleCollider):
        return {
            "type": "capsule",
            "center": list(collider.center),
            "direction": collider.direction,
            "radius": collider.radius,
            "height": collider.height,
        }
    raise TypeError(f"Unknown collider type: {type(collider).__name__}")


def mesh_payload(mesh: MeshData, *, decimals: int = 6) -> Dict[str, Any]:
    """Build a JSON-serialisable export of *mesh*.

    The returned dict has three top-level keys:

    ``metadata``
        Name, counts, generator info.
    ``buffers``
        Per-vertex arrays as nested lists (floats rounded to
        *decimals*) and one flat index list per submesh.
    ``colliders``
        Collider descriptors tagged with their ``type``.
    """
    def floats(buf):
        return None if buf is None else buf.round(decimals).tolist()

    metadata = {
        "version": _EXPORT_VERSION,
        "generator": "planetmesh.io",
        "name": mesh.name,
        "vertex_count": mesh.vertex_count,
        "triangle_count": mesh.triangle_count,
        "submesh_count": len(mesh.submeshes),
    }
    buffers = {
        "positions": floats(mesh.positions),
        "normals": floats(mesh.normals),
        "uvs": floats(mesh.uvs),
        "tangents": floats(mesh.tangents),
        "colors": None if mesh.colors is None else mesh.colors.tolist(),
        "submeshes": [s.tolist() for s in mesh.submeshes],
    }
    return {
        "metadata": metadata,
        "buffers": buffers,
        "colliders": [_collider_entry(c) for c in mesh.colliders],
    }


def export_mesh_json(
    mesh: MeshData,
    path: PathLike,
    *,
    decimals: int = 6,
    indent: Optional[int] = None,
) -> Path:
    """Write :func:`mesh_payload` to *path* and return the path."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(mesh_payload(mesh, decimals=decimals), indent=indent), encoding="utf-8")
    return out


MESH_PAYLOAD_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "planetmesh mesh payload",
    "type": "object",
    "required": ["metadata", "buffers", "colliders"],
    "properties": {
        "metadata": {
            "type": "object",
            "required": ["version", "name", "vertex_count", "triangle_count", "submesh_count"],
        },
        "buffers": {
            "type": "object",
            "required": ["positions", "normals", "uvs", "submeshes"],
            "properties": {
                "positions": {"type": "array", "items": _VEC3},
                "normals": {"type": "array", "items": _VEC3},
                "uvs": {
                    "type": "array",
                    "items": {"type": "array", "minItems": 2, "maxItems": 2},
                },
                "submeshes": {
                    "type": "array",
                    "items": {"type": "array", "items": {"type": "integer", "minimum": 0}},
                },
            },
        },
        "colliders": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["type", "center"],
                "properties": {"type": {"enum": ["sphere", "box", "capsule"]}},
            },
        },
    },
}


def validate_mesh_payload(payload: Dict[str, Any]) -> None:
    """Raise ``jsonschema.ValidationError`` if *payload* is malformed."""
    jsonschema.validate(instance=payload, schema=MESH_PAYLOAD_SCHEMA)
