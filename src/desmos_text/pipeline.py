"""End-to-end conversion: graph state JSON text to DEST text."""

from __future__ import annotations

from desmos_text.exporters.dest import export_dest
from desmos_text.exporters.json_export import export_json
from desmos_text.models import ConverterConfig
from desmos_text.translator import parse_state_string


def json_to_dest(content: str, config: ConverterConfig | None = None) -> str:
    """Convert a graph state JSON string into DEST text."""
    config = config or ConverterConfig()
    program = parse_state_string(content, graph_flags=config.graph_flags)
    return export_dest(program)


def json_to_ir(content: str, config: ConverterConfig | None = None) -> str:
    """Convert a graph state JSON string into a JSON dump of the IR."""
    config = config or ConverterConfig()
    program = parse_state_string(content, graph_flags=config.graph_flags)
    return export_json(program)
