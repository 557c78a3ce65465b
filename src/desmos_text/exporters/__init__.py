"""Renderers for translated programs."""
