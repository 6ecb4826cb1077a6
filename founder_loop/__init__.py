"""
Founder Loop - Weekly Revenue Accountability Engine

Each enrolled founder runs a recurring weekly cycle:
Commit -> Execute -> Report -> Diagnose -> Adjust.

The engine decides which actions are permitted, converts missed deadlines
into violations, compounds violations into escalating consequences
(flags, locks, mandatory review, removal) and gates access to later
program stages.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
