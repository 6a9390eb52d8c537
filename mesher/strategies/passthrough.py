"""Reference strategies that leave geometry unchanged."""

from mesher.core.mesh import Mesh
from mesher.strategies.base import IndexReorderer, Simplifier


class PassthroughSimplifier(Simplifier):
    """Placeholder simplifier: returns an unchanged copy of the mesh."""

    name = "none"

    def reduce(self, mesh: Mesh, target_vertex_count: int) -> Mesh:
        return mesh.replace()


class IdentityReorderer(IndexReorderer):
    """Placeholder reorderer: keeps the triangle order as generated."""

    name = "none"

    def reorder(self, mesh: Mesh) -> Mesh:
        return mesh.replace()
