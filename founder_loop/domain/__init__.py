"""Domain layer for Founder Loop.

Pure business rules of the weekly loop: models, validators, the step
state machine, escalation tracking and stage progression. Nothing in
this package performs I/O or reads the clock.
"""
