"""Geometry kernel shared by the mesher stages."""

from mesher.geometry.kernel import (
    BoundingBox,
    bounding_box,
    face_normal,
    face_normals,
    signed_volumes,
    tetrahedron_signed_volume,
    triangle_area,
    triangle_areas,
    vertex_normals,
)

__all__ = [
    "BoundingBox",
    "bounding_box",
    "face_normal",
    "face_normals",
    "signed_volumes",
    "tetrahedron_signed_volume",
    "triangle_area",
    "triangle_areas",
    "vertex_normals",
]
