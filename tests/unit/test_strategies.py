"""Unit tests for optimizer strategies."""

import inspect

import numpy as np
import pytest
import trimesh

from mesher.core import Mesh, OptimizationError
from mesher.strategies import (
    IdentityReorderer,
    IndexReorderer,
    PassthroughSimplifier,
    QuadricSimplifier,
    Simplifier,
    StrategyFactory,
)


class TestPassthroughStrategies:
    """Test strategies that leave geometry unchanged."""

    def test_passthrough_simplifier(self, sphere_mesh):
        result = PassthroughSimplifier().reduce(sphere_mesh, 10)

        assert result is not sphere_mesh
        assert np.array_equal(result.vertices, sphere_mesh.vertices)
        assert np.array_equal(result.indices, sphere_mesh.indices)

    def test_identity_reorderer(self, cube_mesh):
        result = IdentityReorderer().reorder(cube_mesh)

        assert result is not cube_mesh
        assert np.array_equal(result.indices, cube_mesh.indices)


class TestQuadricSimplifier:
    """Test quadric decimation."""

    def test_small_mesh_returned_unchanged(self, cube_mesh):
        result = QuadricSimplifier().reduce(cube_mesh, 100)

        assert result.face_count == cube_mesh.face_count
        assert np.array_equal(result.vertices, cube_mesh.vertices)

    def test_installed_trimesh_accepts_decimation_keywords(self):
        parameters = inspect.signature(trimesh.Trimesh.simplify_quadric_decimation).parameters

        assert "face_count" in parameters
        assert "aggression" in parameters

    def test_aggression_forwarded(self, sphere_mesh, monkeypatch):
        calls = []

        def record(self, **kwargs):
            calls.append(kwargs)
            return self

        monkeypatch.setattr("trimesh.Trimesh.simplify_quadric_decimation", record)

        QuadricSimplifier(aggression=3).reduce(sphere_mesh, 100)

        assert calls == [{"face_count": 200, "aggression": 3}]

    def test_reduces_sphere(self, sphere_mesh):
        pytest.importorskip("fast_simplification")

        result = QuadricSimplifier().reduce(sphere_mesh, 100)

        assert result.face_count < sphere_mesh.face_count
        assert len(result.normals) == len(result.vertices)
        assert len(result.uvs) == result.vertex_count * 2
        assert result.metadata is sphere_mesh.metadata

    def test_backend_failure_raises_optimization_error(self, sphere_mesh, monkeypatch):
        def explode(self, **kwargs):
            raise RuntimeError("decimation unavailable")

        monkeypatch.setattr(
            "trimesh.Trimesh.simplify_quadric_decimation", explode, raising=False
        )

        with pytest.raises(OptimizationError) as exc_info:
            QuadricSimplifier().reduce(sphere_mesh, 100)

        assert exc_info.value.stage == "simplify"
        assert "decimation unavailable" in str(exc_info.value)


class TestStrategyFactory:
    """Test strategy factory."""

    def test_create_simplifier(self):
        assert isinstance(StrategyFactory.create_simplifier("none"), PassthroughSimplifier)
        assert isinstance(StrategyFactory.create_simplifier("quadric"), QuadricSimplifier)

    def test_create_simplifier_with_kwargs(self):
        simplifier = StrategyFactory.create_simplifier("quadric", aggression=3)

        assert simplifier.aggression == 3

    def test_create_reorderer(self):
        assert isinstance(StrategyFactory.create_reorderer("none"), IdentityReorderer)

    def test_unknown_simplifier(self):
        with pytest.raises(ValueError, match="Unknown simplifier: magic"):
            StrategyFactory.create_simplifier("magic")

    def test_unknown_reorderer(self):
        with pytest.raises(ValueError, match="Unknown reorderer"):
            StrategyFactory.create_reorderer("magic")

    def test_available(self):
        assert set(StrategyFactory.available_simplifiers()) >= {"none", "quadric"}
        assert "none" in StrategyFactory.available_reorderers()

    def test_register_custom_strategies(self, monkeypatch):
        class ReverseReorderer(IndexReorderer):
            name = "reverse"

            def reorder(self, mesh: Mesh) -> Mesh:
                return mesh.replace(indices=mesh.faces[::-1])

        class DropSimplifier(Simplifier):
            name = "drop"

            def reduce(self, mesh: Mesh, target_vertex_count: int) -> Mesh:
                return mesh.replace()

        monkeypatch.setattr(StrategyFactory, "_reorderers", dict(StrategyFactory._reorderers))
        monkeypatch.setattr(StrategyFactory, "_simplifiers", dict(StrategyFactory._simplifiers))

        StrategyFactory.register_reorderer("reverse", ReverseReorderer)
        StrategyFactory.register_simplifier("drop", DropSimplifier)

        assert isinstance(StrategyFactory.create_reorderer("reverse"), ReverseReorderer)
        assert isinstance(StrategyFactory.create_simplifier("drop"), DropSimplifier)
