"""Loop engine API dependencies.

FastAPI dependency providers. Wiring lives in the bootstrap package; the
API layer only asks for the engine.
"""

from founder_loop.application.services.loop_engine_service import LoopEngineService
from founder_loop.bootstrap.loop_engine import get_loop_engine as _get_loop_engine


def get_loop_engine() -> LoopEngineService:
    """Get the loop engine for a request."""
    return _get_loop_engine()
