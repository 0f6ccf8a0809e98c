"""Valet: AI agents, traits and pipelines backend."""

__version__ = "0.1.0"
