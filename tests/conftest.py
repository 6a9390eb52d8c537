"""Shared test fixtures and configuration."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator, Optional

import numpy as np
import pytest
import trimesh

from mesher.core import Config, Mesh, TextMetadata
from mesher.core.metadata import utcnow
from mesher.geometry import vertex_normals

# Side-2 cube centred on the origin, outward winding
CUBE_POSITIONS = np.array(
    [
        [-1, -1, -1],
        [1, -1, -1],
        [1, 1, -1],
        [-1, 1, -1],
        [-1, -1, 1],
        [1, -1, 1],
        [1, 1, 1],
        [-1, 1, 1],
    ],
    dtype=np.float64,
)
CUBE_FACES = np.array(
    [
        [0, 2, 1], [0, 3, 2],
        [4, 5, 6], [4, 6, 7],
        [0, 1, 5], [0, 5, 4],
        [3, 7, 6], [3, 6, 2],
        [0, 4, 7], [0, 7, 3],
        [1, 2, 6], [1, 6, 5],
    ],
    dtype=np.int64,
)

TETRA_POSITIONS = np.array(
    [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]],
    dtype=np.float64,
)
TETRA_FACES = np.array(
    [[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]],
    dtype=np.int64,
)


def build_mesh(
    positions: np.ndarray,
    faces: np.ndarray,
    normals: Optional[np.ndarray] = None,
    mesh_id: str = "mesh_test",
) -> Mesh:
    """Build a text-sourced mesh with computed normals and zero UVs."""
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if normals is None:
        normals = vertex_normals(positions, faces)
    return Mesh(
        id=mesh_id,
        vertices=positions,
        indices=faces,
        normals=normals,
        uvs=np.zeros((len(positions), 2)),
        metadata=TextMetadata(generation_time=utcnow(), description="fixture"),
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration."""
    return Config(
        mesher={"quality": "medium", "resolution": 64},
        logging={"level": "DEBUG", "format": "plain"},
    )


@pytest.fixture
def make_mesh() -> Callable[..., Mesh]:
    """Factory building meshes from positions and faces."""
    return build_mesh


@pytest.fixture
def cube_mesh() -> Mesh:
    """Closed side-2 cube centred on the origin (8 vertices, 12 faces)."""
    return build_mesh(CUBE_POSITIONS, CUBE_FACES, mesh_id="mesh_cube")


@pytest.fixture
def tetrahedron_mesh() -> Mesh:
    """Closed tetrahedron, every edge shared by exactly two faces."""
    return build_mesh(TETRA_POSITIONS, TETRA_FACES, mesh_id="mesh_tetra")


@pytest.fixture
def dangling_triangle_mesh() -> Mesh:
    """Tetrahedron plus a separate triangle whose edges have one incident face."""
    positions = np.vstack([TETRA_POSITIONS, [[5, 5, 5], [6, 5, 5], [5, 6, 5]]])
    faces = np.vstack([TETRA_FACES, [[4, 5, 6]]])
    return build_mesh(positions, faces, mesh_id="mesh_dangling")


@pytest.fixture
def unwelded_cube_mesh() -> Mesh:
    """Side-2 cube where every face corner has its own vertex (36 vertices)."""
    positions = CUBE_POSITIONS[CUBE_FACES.reshape(-1)]
    faces = np.arange(len(positions)).reshape(-1, 3)
    return build_mesh(positions, faces, mesh_id="mesh_unwelded")


@pytest.fixture
def icosphere() -> trimesh.Trimesh:
    """Reference sphere used as an independent oracle."""
    return trimesh.creation.icosphere(subdivisions=3, radius=1.5)


@pytest.fixture
def sphere_mesh(icosphere: trimesh.Trimesh) -> Mesh:
    """Mesher copy of the reference sphere."""
    return build_mesh(icosphere.vertices, icosphere.faces, mesh_id="mesh_sphere")


# Markers for different test categories
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 1 second"
    )
