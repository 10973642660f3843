"""Klondike Solitaire rules engine and its collaborators."""

__version__ = "0.1.0"
