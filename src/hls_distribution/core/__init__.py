"""Core application wiring."""

from .config import AppConfig

__all__ = ["AppConfig"]
