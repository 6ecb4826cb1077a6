"""Infrastructure adapters for Founder Loop."""
