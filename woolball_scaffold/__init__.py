"""Woolball scaffold: download Woolball API templates into a local project."""

__version__ = "0.1.0"
