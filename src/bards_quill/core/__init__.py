"""Core splitting primitives."""
