"""API dependency providers."""

from founder_loop.api.dependencies.loop_engine import get_loop_engine

__all__ = ["get_loop_engine"]
