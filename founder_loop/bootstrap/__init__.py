"""Composition root for wiring dependencies.

This package centralizes infrastructure-aware wiring so API, worker and
application layers can depend on ports without importing infrastructure
directly.
"""
