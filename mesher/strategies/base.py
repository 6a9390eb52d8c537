"""Pluggable strategy interfaces for the optimizer."""

from abc import ABC, abstractmethod

from mesher.core.mesh import Mesh


class Simplifier(ABC):
    """Reduces a mesh towards a target vertex count.

    Implementations must return a new mesh and leave the input untouched.
    The returned mesh must keep ``normals`` and ``uvs`` sized to its vertex
    count; the optimizer recomputes normals afterwards.
    """

    name: str = "base"

    @abstractmethod
    def reduce(self, mesh: Mesh, target_vertex_count: int) -> Mesh:
        """Simplify ``mesh``.

        Args:
            mesh: Validated input mesh
            target_vertex_count: Desired upper bound on vertices

        Returns:
            Simplified mesh
        """
        pass


class IndexReorderer(ABC):
    """Reorders triangle indices, e.g. for vertex cache locality."""

    name: str = "base"

    @abstractmethod
    def reorder(self, mesh: Mesh) -> Mesh:
        """Return a mesh with the same triangles in a new order."""
        pass
