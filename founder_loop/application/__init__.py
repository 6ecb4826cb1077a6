"""Application layer for Founder Loop.

Orchestrates the domain services behind ports: the loop engine loads and
saves participant aggregates, reads the clock and queues notification
intents.
"""
