"""Command parsing and execution gating for chat bots."""

__version__ = "0.1.0"
