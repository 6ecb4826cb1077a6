"""Configuration module for Founder Loop.

Available Configurations:
- LoopConfig: Every weekly-loop business rule (deadlines, thresholds, stages)
"""

from founder_loop.config.loop_config import (
    DEFAULT_LOOP_CONFIG,
    DEFAULT_SYSTEM_DOCUMENT_SECTIONS,
    DEFAULT_VAGUE_PHRASES,
    LoopConfig,
)

__all__ = [
    "LoopConfig",
    "DEFAULT_LOOP_CONFIG",
    "DEFAULT_SYSTEM_DOCUMENT_SECTIONS",
    "DEFAULT_VAGUE_PHRASES",
]
