"""Quadric error metric simplification backed by trimesh."""

from typing import Optional

import numpy as np
from scipy.spatial import cKDTree

from mesher.core.exceptions import OptimizationError
from mesher.core.mesh import Mesh
from mesher.geometry import vertex_normals
from mesher.strategies.base import Simplifier
from mesher.utils.logging import get_logger

logger = get_logger(__name__)


class QuadricSimplifier(Simplifier):
    """Decimates a mesh with trimesh's quadric decimation.

    trimesh delegates to the ``fast_simplification`` package, which must be
    installed for this strategy to work. UV coordinates of the decimated
    mesh are taken from the nearest vertex of the input.
    """

    name = "quadric"

    # Closed triangle meshes have roughly twice as many faces as vertices
    FACES_PER_VERTEX = 2

    def __init__(self, aggression: Optional[int] = None):
        """Initialize quadric simplifier.

        Args:
            aggression: Optional trimesh aggression level (0-10)
        """
        self.aggression = aggression

    def reduce(self, mesh: Mesh, target_vertex_count: int) -> Mesh:
        target_faces = max(4, self.FACES_PER_VERTEX * target_vertex_count)
        if mesh.face_count <= target_faces:
            return mesh.replace()

        kwargs = {"face_count": target_faces}
        if self.aggression is not None:
            kwargs["aggression"] = self.aggression

        try:
            simplified = mesh.to_trimesh().simplify_quadric_decimation(**kwargs)
        except Exception as e:
            raise OptimizationError("simplify", str(e)) from e

        positions = np.asarray(simplified.vertices, dtype=np.float64)
        faces = np.asarray(simplified.faces, dtype=np.int64)

        _, nearest = cKDTree(mesh.positions).query(positions)
        uvs = mesh.uvs.reshape(-1, 2)[nearest]

        logger.debug(
            "quadric_simplified",
            mesh_id=mesh.id,
            faces_before=mesh.face_count,
            faces_after=len(faces),
            target_faces=target_faces,
        )

        return mesh.replace(
            vertices=positions,
            indices=faces,
            normals=vertex_normals(positions, faces),
            uvs=uvs,
        )
