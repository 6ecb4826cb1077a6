"""HTTP API for the weekly loop engine."""
