"""desmos-text: translate Desmos graph state into DEST text."""

__version__ = "0.1.0"
