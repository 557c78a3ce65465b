"""Translation of Desmos graph state (version 8) into the DEST IR.

The walk is a single pass over the expression list. Folder membership is
contiguous: an item joins the open folder only while every item since the
folder has named it, and a closed folder is never reopened.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from desmos_text.errors import UnsupportedItemError, UnsupportedVersionError
from desmos_text.formatting import format_number
from desmos_text.models import (
    ArrowMode,
    AxesSetting,
    AxisArrowsSetting,
    AxisLabelsSetting,
    AxisNumbersSetting,
    AxisStepsSetting,
    BinsAlignedOption,
    BoxplotOption,
    CdfOption,
    ClickableLabelOption,
    ClickableRule,
    ClickableRulesOption,
    ColorOption,
    ColumnLine,
    DisplayOption,
    DomainOption,
    DotplotOption,
    DragOption,
    ExprAffix,
    FillOption,
    FlagsSetting,
    FolderAffix,
    FpsOption,
    HistogramModeOption,
    IdOption,
    ImageAffix,
    ImageOption,
    Interval,
    ItemLine,
    LabelOption,
    Latex,
    Line,
    LinesOption,
    MinorSubdivisionsSetting,
    NameOption,
    NoteAffix,
    NumberInterval,
    OptionGroup,
    PointsOption,
    PolarDomainOption,
    Program,
    RegressionOption,
    RegressionParameter,
    SeedSetting,
    ShowOrHide,
    SimulationAffix,
    SliderOption,
    SmallFlag,
    TableAffix,
    ViewportSetting,
)

logger = logging.getLogger(__name__)

SUPPORTED_VERSION = 8

# (graph field, token when true, token when false)
_GRAPH_FLAGS = (
    ("degreeMode", "degrees", "radians"),
    ("showGrid", "show grid", "hide grid"),
    ("polarMode", "polar grid", "cartesian grid"),
    ("squareAxes", "square axes", "no square axes"),
    ("restrictGridToFirstQuadrant", "first quadrant", "all quadrants"),
)


def _identity(value: Any) -> Any:
    return value


def _arrow_mode(value: str) -> ArrowMode:
    return ArrowMode(value.lower())


def _show_or_hide(value: bool) -> ShowOrHide:
    return ShowOrHide.SHOW if value else ShowOrHide.HIDE


# (setting line, ((IR field, graph field), ...), value transform)
_AXIS_SETTINGS: tuple[tuple[type, tuple[tuple[str, str], ...], Callable[[Any], Any]], ...] = (
    (
        MinorSubdivisionsSetting,
        (("x", "xAxisMinorSubdivisions"), ("y", "yAxisMinorSubdivisions")),
        _identity,
    ),
    (AxisStepsSetting, (("x", "xAxisStep"), ("y", "yAxisStep")), _identity),
    (AxisArrowsSetting, (("x", "xAxisArrowMode"), ("y", "yAxisArrowMode")), _arrow_mode),
    (AxisLabelsSetting, (("x", "xAxisLabel"), ("y", "yAxisLabel")), _identity),
    (AxesSetting, (("x", "showXAxis"), ("y", "showYAxis")), _show_or_hide),
    (
        AxisNumbersSetting,
        (("x", "xAxisNumbers"), ("y", "yAxisNumbers"), ("polar", "polarNumbers")),
        _show_or_hide,
    ),
)

_LOOP_MODE_FLAGS = {
    "LOOP_FORWARD": "loop forward",
    "PLAY_ONCE": "once forward",
    "PLAY_INDEFINITELY": "forever forward",
}

_DRAG_MODE_FLAGS = {"X": "x", "Y": "y", "XY": "xy"}

_EDITABLE_LABEL_FLAGS = {"MATH": "editable math", "TEXT": "editable text"}


def parse_state_string(content: str, graph_flags: bool = False) -> Program:
    """Decode a graph state JSON string and translate it."""
    state = json.loads(content)
    return translate_state(state, graph_flags=graph_flags)


def translate_state(state: dict[str, Any], graph_flags: bool = False) -> Program:
    """Translate a decoded graph state into a Program.

    Raises UnsupportedVersionError unless the document is version 8; no
    partial translation is attempted.
    """
    if not isinstance(state, dict):
        raise UnsupportedVersionError(None, SUPPORTED_VERSION)
    version = state.get("version")
    if isinstance(version, bool) or version != SUPPORTED_VERSION:
        raise UnsupportedVersionError(version, SUPPORTED_VERSION)

    graph = state.get("graph") or {}
    lines: list[Line] = []

    if _has(state, "randomSeed"):
        lines.append(SeedSetting(seed=state["randomSeed"]))

    if graph_flags:
        flags = _translate_graph_flags(graph)
        if flags:
            lines.append(FlagsSetting(flags=flags))

    lines.extend(_translate_settings(graph))

    items = (state.get("expressions") or {}).get("list") or []
    lines.extend(_translate_items(items))

    logger.debug("Translated %d item(s) into %d line(s)", len(items), len(lines))
    return Program(lines=tuple(lines))


def _translate_graph_flags(graph: dict[str, Any]) -> tuple[str, ...]:
    flags: list[str] = []
    for key, if_true, if_false in _GRAPH_FLAGS:
        if graph.get(key) is True:
            flags.append(if_true)
        elif graph.get(key) is False:
            flags.append(if_false)
    return tuple(flags)


def _translate_settings(graph: dict[str, Any]) -> list[Line]:
    viewport = graph["viewport"]
    lines: list[Line] = [
        ViewportSetting(
            x=NumberInterval(start=viewport["xmin"], end=viewport["xmax"]),
            y=NumberInterval(start=viewport["ymin"], end=viewport["ymax"]),
        )
    ]
    for setting_type, sources, transform in _AXIS_SETTINGS:
        values = {
            name: transform(graph[source])
            for name, source in sources
            if _has(graph, source)
        }
        # A setting line with no sub-fields is never constructed.
        if values:
            lines.append(setting_type(**values))
    return lines


# ── Items and folders ────────────────────────────────────────────────


@dataclass
class _OpenFolder:
    """The folder currently accepting children, and where its line sits."""

    id: str
    index: int
    line: ItemLine
    children: list[ItemLine] = field(default_factory=list)

    def close(self, lines: list[Line]) -> None:
        affix = replace(self.line.affix_group, children=tuple(self.children))
        lines[self.index] = replace(self.line, affix_group=affix)
        logger.debug("Closed folder %r with %d child(ren)", self.id, len(self.children))


def _translate_items(items: list[dict[str, Any]]) -> list[Line]:
    lines: list[Line] = []
    open_folder: _OpenFolder | None = None

    for item in items:
        line = translate_item(item)
        is_folder = item.get("type") == "folder"

        if (
            not is_folder
            and open_folder is not None
            and item.get("folderId") == open_folder.id
        ):
            open_folder.children.append(line)
            continue

        if open_folder is not None and (is_folder or item.get("id") != open_folder.id):
            open_folder.close(lines)
            open_folder = None

        lines.append(line)
        if is_folder:
            open_folder = _OpenFolder(id=item.get("id"), index=len(lines) - 1, line=line)
            logger.debug("Opened folder %r", open_folder.id)

    if open_folder is not None:
        open_folder.close(lines)
    return lines


def translate_item(item: dict[str, Any]) -> ItemLine:
    """Translate one expression-list entry, ignoring folder membership."""
    item_type = item.get("type")
    small_flags: list[SmallFlag] = []
    option_groups: list[OptionGroup] = [IdOption(value=str(item["id"]))]
    option_groups.extend(_common_option_groups(item))

    if item.get("secret"):
        small_flags.append(SmallFlag.SECRET)
    if item.get("hidden"):
        small_flags.append(SmallFlag.HIDDEN)

    if item_type == "folder":
        affix = FolderAffix(title=item.get("title"))
        if item.get("collapsed"):
            small_flags.append(SmallFlag.COLLAPSED)
    elif item_type == "table":
        affix = TableAffix(
            columns=tuple(translate_column(c) for c in item.get("columns") or [])
        )
    elif item_type == "simulation":
        clickable_info = item.get("clickableInfo") or {}
        affix = SimulationAffix(
            rules=_translate_clickable_rules(clickable_info.get("rules") or [])
        )
        if item.get("isPlaying"):
            small_flags.append(SmallFlag.PLAYING)
        if _has(item, "fps"):
            option_groups.append(FpsOption(value=_latex(item["fps"])))
    elif item_type == "expression":
        latex = item.get("latex")
        affix = ExprAffix(expr=_latex(latex if latex is not None else ""))
        option_groups.extend(_expression_option_groups(item))
    elif item_type == "image":
        affix = ImageAffix(image_url=item.get("image_url") or "")
        if item.get("foreground"):
            small_flags.append(SmallFlag.FOREGROUND)
        if item.get("draggable"):
            small_flags.append(SmallFlag.DRAGGABLE)
        if _has(item, "name"):
            option_groups.append(NameOption(value=item["name"]))
        image_opts = {
            name: _latex(item[name])
            for name in ("width", "height", "center", "angle", "opacity")
            if _has(item, name)
        }
        if image_opts:
            option_groups.append(ImageOption(**image_opts))
    elif item_type == "text":
        affix = NoteAffix(text=item.get("text"))
    else:
        raise UnsupportedItemError(item_type, item.get("id"))

    return ItemLine(
        affix_group=affix,
        small_flags=tuple(small_flags),
        option_groups=tuple(option_groups),
    )


def translate_column(column: dict[str, Any]) -> ColumnLine:
    """Translate one table column into a ColumnLine."""
    return ColumnLine(
        values=tuple(_latex(v) for v in column.get("values") or []),
        header=_optional_latex(column, "latex"),
        small_flags=(SmallFlag.HIDDEN,) if column.get("hidden") else (),
        option_groups=tuple(_common_option_groups(column)),
    )


def _translate_clickable_rules(rules: list[dict[str, Any]]) -> tuple[ClickableRule, ...]:
    return tuple(
        ClickableRule(
            id=str(rule["id"]) if _has(rule, "id") else None,
            assignment=_latex(rule.get("assignment") or ""),
            expression=_latex(rule.get("expression") or ""),
        )
        for rule in rules
    )


# ── Option groups ────────────────────────────────────────────────────


def _common_option_groups(item: dict[str, Any]) -> list[OptionGroup]:
    """Styling shared by expressions and table columns.

    Each group is emitted only when the item defines one of its fields.
    """
    groups: list[OptionGroup] = []

    point_flags: list[str] = []
    if _has(item, "points"):
        point_flags.append("show" if item["points"] else "hide")
    if _has(item, "pointStyle") and item["pointStyle"] != "POINT":
        point_flags.append("open" if item["pointStyle"] == "OPEN" else "cross")
    if point_flags or _has(item, "pointOpacity") or _has(item, "pointSize"):
        groups.append(PointsOption(
            flags=tuple(point_flags),
            opacity=_optional_latex(item, "pointOpacity"),
            size=_optional_latex(item, "pointSize"),
        ))

    line_flags: list[str] = []
    if _has(item, "lines"):
        line_flags.append("show" if item["lines"] else "hide")
    if _has(item, "lineStyle") and item["lineStyle"] != "SOLID":
        line_flags.append("dashed" if item["lineStyle"] == "DASHED" else "dotted")
    if line_flags or _has(item, "lineOpacity") or _has(item, "lineWidth"):
        groups.append(LinesOption(
            flags=tuple(line_flags),
            opacity=_optional_latex(item, "lineOpacity"),
            width=_optional_latex(item, "lineWidth"),
        ))

    if _has(item, "fill") or _has(item, "fillOpacity"):
        groups.append(FillOption(
            flags=("show" if item["fill"] else "hide",) if _has(item, "fill") else (),
            opacity=_optional_latex(item, "fillOpacity"),
        ))

    if _has(item, "color") or _has(item, "colorLatex"):
        groups.append(ColorOption(
            value=item.get("color"),
            var=_optional_latex(item, "colorLatex"),
        ))

    drag_flag = _DRAG_MODE_FLAGS.get(item.get("dragMode"))
    if drag_flag is not None:
        groups.append(DragOption(flags=(drag_flag,)))

    return groups


def _expression_option_groups(item: dict[str, Any]) -> list[OptionGroup]:
    groups: list[OptionGroup] = []
    clickable_info = item.get("clickableInfo") or {}
    viz_props = item.get("vizProps") or {}

    if _has(clickable_info, "description"):
        groups.append(ClickableLabelOption(value=clickable_info["description"]))

    if _has(clickable_info, "rules"):
        groups.append(ClickableRulesOption(
            rules=_translate_clickable_rules(clickable_info["rules"]),
            flags=() if clickable_info.get("enabled") else ("disabled",),
        ))

    regression = _regression_option(item)
    if regression is not None:
        groups.append(regression)

    slider = _slider_option(item.get("slider") or {})
    if slider is not None:
        groups.append(slider)

    # `domain` and `parametricDomain` are not merged; only `domain` maps.
    if _has(item, "polarDomain"):
        groups.append(PolarDomainOption(value=_interval(item["polarDomain"])))
    if _has(item, "domain"):
        groups.append(DomainOption(value=_interval(item["domain"])))

    cdf = item.get("cdf") or {}
    cdf_interval = _interval(cdf)
    cdf_flags = ("show",) if cdf.get("show") else ()
    if cdf_interval != Interval() or cdf_flags:
        groups.append(CdfOption(
            value=cdf_interval if cdf_interval != Interval() else None,
            flags=cdf_flags,
        ))

    label = _label_option(item)
    if label is not None:
        groups.append(label)

    if item.get("displayEvaluationAsFraction"):
        groups.append(DisplayOption())

    if viz_props.get("binAlignment") == "left":
        groups.append(BinsAlignedOption())

    histogram_mode = viz_props.get("histogramMode")
    if histogram_mode is not None and histogram_mode != "count":
        groups.append(HistogramModeOption(flags=(histogram_mode,)))

    # The IR flag reads "binned x"; the source records it as "exact".
    if viz_props.get("dotplotXMode") == "exact":
        groups.append(DotplotOption())

    boxplot_flags: list[str] = []
    if viz_props.get("showBoxplotOutliers"):
        boxplot_flags.append("include outliers")
    if viz_props.get("alignedAxis") == "y":
        boxplot_flags.append("aligned to y")
    if boxplot_flags or _has(viz_props, "breadth") or _has(viz_props, "axisOffset"):
        groups.append(BoxplotOption(
            breadth=_optional_latex(viz_props, "breadth"),
            offset=_optional_latex(viz_props, "axisOffset"),
            flags=tuple(boxplot_flags),
        ))

    return groups


def _regression_option(item: dict[str, Any]) -> RegressionOption | None:
    parameters = item.get("regressionParameters") or {}
    residual = item.get("residualVariable")
    log_mode = bool(item.get("isLogModeRegression"))
    if not (parameters or residual or log_mode):
        return None
    return RegressionOption(
        parameters=tuple(
            RegressionParameter(parameter=_latex(name), value=value)
            for name, value in parameters.items()
        ),
        residual_variable=_latex(residual) if residual else None,
        flags=("log mode",) if log_mode else (),
    )


def _slider_option(slider: dict[str, Any]) -> SliderOption | None:
    flags: list[str] = []
    if slider.get("hardMin"):
        flags.append("hard min")
    if slider.get("hardMax"):
        flags.append("hard max")
    # LOOP_FORWARD_REVERSE is the unflagged default.
    loop_flag = _LOOP_MODE_FLAGS.get(slider.get("loopMode"))
    if loop_flag is not None:
        flags.append(loop_flag)
    if slider.get("playDirection") == -1:
        flags.append("left")

    bounds = _interval(slider)
    period = _optional_latex(slider, "animationPeriod")
    if not flags and bounds == Interval() and period is None:
        return None
    return SliderOption(
        value=bounds if bounds != Interval() else None,
        period=period,
        flags=tuple(flags),
    )


def _label_option(item: dict[str, Any]) -> LabelOption | None:
    flags: list[str] = []
    if item.get("showLabel"):
        flags.append("show")
    editable = _EDITABLE_LABEL_FLAGS.get(item.get("editableLabelMode"))
    if editable is not None:
        flags.append(editable)
    if item.get("interactiveLabel"):
        flags.append("show on hover")
    if item.get("suppressTextOutline"):
        flags.append("no outline")

    text = item.get("label") or None
    size = _optional_latex(item, "labelSize")
    angle = _optional_latex(item, "labelAngle")
    if not flags and text is None and size is None and angle is None:
        return None
    return LabelOption(value=text, size=size, angle=angle, flags=tuple(flags))


# ── Helpers ──────────────────────────────────────────────────────────


def _has(obj: dict[str, Any], key: str) -> bool:
    """True when the key is present with a non-null value."""
    return obj.get(key) is not None


def _latex(value: Any) -> Latex:
    if isinstance(value, str):
        return Latex(value)
    return Latex(format_number(value))


def _optional_latex(obj: dict[str, Any], key: str) -> Latex | None:
    return _latex(obj[key]) if _has(obj, key) else None


def _interval(obj: dict[str, Any]) -> Interval:
    return Interval(
        min=_optional_latex(obj, "min"),
        max=_optional_latex(obj, "max"),
        step=_optional_latex(obj, "step"),
    )
