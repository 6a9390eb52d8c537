"""Optimizer strategies for Mesher."""

from mesher.strategies.base import IndexReorderer, Simplifier
from mesher.strategies.factory import StrategyFactory
from mesher.strategies.passthrough import IdentityReorderer, PassthroughSimplifier
from mesher.strategies.quadric import QuadricSimplifier

__all__ = [
    "Simplifier",
    "IndexReorderer",
    "StrategyFactory",
    "PassthroughSimplifier",
    "IdentityReorderer",
    "QuadricSimplifier",
]
