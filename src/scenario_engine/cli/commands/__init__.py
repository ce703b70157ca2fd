"""CLI command modules."""

from . import run, validate, listing

__all__ = ["run", "validate", "listing"]
