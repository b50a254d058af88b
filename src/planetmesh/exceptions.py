"""Custom exceptions for the planetmesh package."""


class PlanetMeshError(Exception):
    """Base exception for planetmesh package."""

    pass


class DegenerateGeometryError(PlanetMeshError, ValueError):
    """Generation parameters describe no valid closed mesh."""

    pass


class BufferSizeError(PlanetMeshError, RuntimeError):
    """Generated buffers disagree with their pre-computed sizes."""

    pass
