"""Factory for creating optimizer strategies."""

from typing import Any, Dict, Type

from mesher.strategies.base import IndexReorderer, Simplifier
from mesher.strategies.passthrough import IdentityReorderer, PassthroughSimplifier
from mesher.strategies.quadric import QuadricSimplifier


class StrategyFactory:
    """Factory for simplifier and index reorderer strategies."""

    _simplifiers: Dict[str, Type[Simplifier]] = {
        "none": PassthroughSimplifier,
        "quadric": QuadricSimplifier,
    }

    _reorderers: Dict[str, Type[IndexReorderer]] = {
        "none": IdentityReorderer,
    }

    @classmethod
    def create_simplifier(cls, name: str, **kwargs: Any) -> Simplifier:
        """Create a simplifier.

        Args:
            name: Registered simplifier name
            **kwargs: Additional arguments for the strategy

        Returns:
            Simplifier instance

        Raises:
            ValueError: If name is unknown
        """
        if name not in cls._simplifiers:
            available = ", ".join(cls._simplifiers.keys())
            raise ValueError(f"Unknown simplifier: {name}. Available: {available}")
        return cls._simplifiers[name](**kwargs)

    @classmethod
    def create_reorderer(cls, name: str, **kwargs: Any) -> IndexReorderer:
        """Create an index reorderer.

        Raises:
            ValueError: If name is unknown
        """
        if name not in cls._reorderers:
            available = ", ".join(cls._reorderers.keys())
            raise ValueError(f"Unknown reorderer: {name}. Available: {available}")
        return cls._reorderers[name](**kwargs)

    @classmethod
    def register_simplifier(cls, name: str, strategy_class: Type[Simplifier]) -> None:
        cls._simplifiers[name] = strategy_class

    @classmethod
    def register_reorderer(cls, name: str, strategy_class: Type[IndexReorderer]) -> None:
        cls._reorderers[name] = strategy_class

    @classmethod
    def available_simplifiers(cls) -> list[str]:
        return list(cls._simplifiers.keys())

    @classmethod
    def available_reorderers(cls) -> list[str]:
        return list(cls._reorderers.keys())
