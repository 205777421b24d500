"""Stagecoach command-line interface."""

from stagecoach.cli.main import main

__all__ = ["main"]
