"""DEST text export for translated programs.

Indentation is threaded explicitly through every recursive call; each
nesting level adds two spaces.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from desmos_text.errors import InvariantError
from desmos_text.formatting import format_number
from desmos_text.models import (
    BLOCK_AFFIXES,
    AffixGroup,
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

T = TypeVar("T")

INDENT = "  "

_ARROW_TOKENS = {
    ArrowMode.NONE: "-",
    ArrowMode.POSITIVE: "->",
    ArrowMode.BOTH: "<->",
}


def export_dest(program: Program) -> str:
    """Export a Program as DEST text, one line per top-level line."""
    return "\n".join(encode_line(line) for line in program.lines)


def encode_line(line: Line) -> str:
    if isinstance(line, ItemLine):
        return encode_item_line(line, "")
    if isinstance(line, SeedSetting):
        return f"seed: {encode_string(line.seed)}"
    if isinstance(line, FlagsSetting):
        return f"flags: {', '.join(line.flags)}"
    if isinstance(line, ViewportSetting):
        return "viewport: " + _xyp(line, _encode_number_interval)
    if isinstance(line, MinorSubdivisionsSetting):
        return "minor-subdivisions: " + _xyp(line, format_number)
    if isinstance(line, AxisStepsSetting):
        return "axis steps: " + _xyp(line, format_number)
    if isinstance(line, AxisArrowsSetting):
        return "axis arrows: " + _xyp(line, _ARROW_TOKENS.__getitem__)
    if isinstance(line, AxisLabelsSetting):
        return "axis labels: " + _xyp(line, encode_string)
    if isinstance(line, AxesSetting):
        return "axes: " + _xyp(line, _show_or_hide)
    if isinstance(line, AxisNumbersSetting):
        return "axis numbers: " + _xyp(line, _show_or_hide)
    raise InvariantError(f"Cannot encode line of type {type(line).__name__}")


def _xyp(line: object, fn: Callable[[T], str]) -> str:
    """Render the present x, y and polar sub-fields in that order."""
    parts: list[str] = []
    for name in ("x", "y", "polar"):
        value = getattr(line, name, None)
        if value is not None:
            parts.append(f"{name} {fn(value)}")
    if not parts:
        raise InvariantError(
            f"{type(line).__name__} has none of x, y, or polar defined"
        )
    return ", ".join(parts)


def _encode_number_interval(interval: NumberInterval) -> str:
    return f"[{format_number(interval.start)}:{format_number(interval.end)}]"


def _show_or_hide(value: ShowOrHide) -> str:
    return value.value


# ── Items ────────────────────────────────────────────────────────────


def encode_item_line(line: ItemLine, indentation: str) -> str:
    """Render an item; block kinds put their option groups first."""
    flags = _encode_small_flags(line.small_flags)
    affix_text = encode_affix_group(line.affix_group, indentation)
    affix = flags + affix_text if affix_text else flags.rstrip()
    options = " ".join(
        f"{encode_option_group(group, indentation)};" for group in line.option_groups
    )

    if isinstance(line.affix_group, BLOCK_AFFIXES):
        first, second = options, affix
    else:
        first, second = affix, options
    separator = " " if first and second else ""
    return f"{indentation}{first}{separator}{second}"


def encode_affix_group(affix_group: AffixGroup, indentation: str) -> str:
    if isinstance(affix_group, FolderAffix):
        title = f"{encode_string(affix_group.title)} " if affix_group.title else ""
        body = _encode_block(
            [encode_item_line(c, indentation + INDENT) for c in affix_group.children],
            "",
        )
        return f"folder {title}{body}"
    if isinstance(affix_group, TableAffix):
        if not affix_group.columns:
            return "table { }"
        columns = [encode_column_line(c, indentation + INDENT) for c in affix_group.columns]
        return f"table {_encode_block(columns, indentation)}"
    if isinstance(affix_group, SimulationAffix):
        return f"simulation {encode_clickable_rules(affix_group.rules, indentation)}"
    if isinstance(affix_group, ExprAffix):
        return encode_latex(affix_group.expr) if affix_group.expr is not None else ""
    if isinstance(affix_group, ImageAffix):
        return f"image {encode_string(affix_group.image_url)}"
    if isinstance(affix_group, NoteAffix):
        if affix_group.text is None:
            return "note"
        return f"note {encode_string(affix_group.text)}"
    raise InvariantError(f"Cannot encode affix group {type(affix_group).__name__}")


def encode_column_line(column: ColumnLine, indentation: str) -> str:
    flags = _encode_small_flags(column.small_flags)
    options = "".join(
        f"; {encode_option_group(group, indentation)}" for group in column.option_groups
    )
    return f"{indentation}{flags}{encode_latex_list(column.values)}{options}"


def encode_clickable_rules(rules: tuple[ClickableRule, ...], indentation: str) -> str:
    return _encode_block(
        [encode_clickable_rule(rule, indentation + INDENT) for rule in rules],
        "",
    )


def encode_clickable_rule(rule: ClickableRule, indentation: str) -> str:
    out = (
        f"{indentation}{encode_latex(rule.assignment)} <- "
        f"{encode_latex(rule.expression)}"
    )
    if rule.id is not None:
        out += f"; id: {encode_string(rule.id)}"
    return out


def _encode_block(lines: list[str], closing_indentation: str) -> str:
    # An empty block is `{ }`, never two bare newlines. Only table braces are
    # indented on close; folder and rule blocks close at column 0.
    if not lines:
        return "{ }"
    body = "\n".join(lines)
    return f"{{\n{body}\n{closing_indentation}}}"


def _encode_small_flags(flags: tuple[SmallFlag, ...]) -> str:
    return "".join(f"{flag.value} " for flag in flags)


# ── Option groups ────────────────────────────────────────────────────


def encode_option_group(group: OptionGroup, indentation: str) -> str:
    """Render `key: <special>, <flags>, <name>=<expr>`."""
    special, flags, opts = _option_parts(group, indentation)
    trailing = ", ".join(
        [*flags, *(f"{name}={encode_latex(value)}" for name, value in opts if value is not None)]
    )
    joiner = ", " if special and trailing else ""
    body = f"{special}{joiner}{trailing}"
    return f"{group.key}: {body}" if body else f"{group.key}:"


def _option_parts(
    group: OptionGroup, indentation: str
) -> tuple[str, tuple[str, ...], list[tuple[str, Latex | None]]]:
    """Split a group into its special value, flag tokens, and sub-options."""
    if isinstance(group, IdOption):
        return encode_string(group.value), (), []
    if isinstance(group, ColorOption):
        return _optional_string(group.value), (), [("var", group.var)]
    if isinstance(group, LabelOption):
        return (
            _optional_string(group.value),
            group.flags,
            [("size", group.size), ("angle", group.angle)],
        )
    if isinstance(group, SliderOption):
        return _optional_interval(group.value), group.flags, [("period", group.period)]
    if isinstance(group, (DomainOption, PolarDomainOption)):
        return encode_interval(group.value), (), []
    if isinstance(group, CdfOption):
        return _optional_interval(group.value), group.flags, []
    if isinstance(group, RegressionOption):
        return (
            f"{{{encode_regression_parameters(group.parameters)}}}",
            group.flags,
            [("residuals", group.residual_variable)],
        )
    if isinstance(group, FpsOption):
        return encode_latex(group.value), (), []
    if isinstance(group, ClickableRulesOption):
        return encode_clickable_rules(group.rules, indentation), group.flags, []
    if isinstance(group, (ClickableLabelOption, NameOption)):
        return encode_string(group.value), (), []
    if isinstance(
        group,
        (DisplayOption, BinsAlignedOption, HistogramModeOption, DragOption, DotplotOption),
    ):
        return "", group.flags, []
    if isinstance(group, PointsOption):
        return "", group.flags, [("opacity", group.opacity), ("size", group.size)]
    if isinstance(group, LinesOption):
        return "", group.flags, [("opacity", group.opacity), ("width", group.width)]
    if isinstance(group, FillOption):
        return "", group.flags, [("opacity", group.opacity)]
    if isinstance(group, BoxplotOption):
        return "", group.flags, [("breadth", group.breadth), ("offset", group.offset)]
    if isinstance(group, ImageOption):
        return "", (), [
            ("width", group.width),
            ("height", group.height),
            ("center", group.center),
            ("angle", group.angle),
            ("opacity", group.opacity),
        ]
    raise InvariantError(f"Cannot encode option group {type(group).__name__}")


def encode_regression_parameters(parameters: tuple[RegressionParameter, ...]) -> str:
    if not parameters:
        return " "
    return ", ".join(
        f"{encode_latex(p.parameter)}={format_number(p.value)}" for p in parameters
    )


def _optional_string(value: str | None) -> str:
    return encode_string(value) if value is not None else ""


def _optional_interval(value: Interval | None) -> str:
    return encode_interval(value) if value is not None else ""


# ── Literals ─────────────────────────────────────────────────────────


def encode_string(s: str) -> str:
    """Double-quote a string, doubling every embedded quote."""
    return '"' + s.replace('"', '""') + '"'


def encode_latex(latex: Latex) -> str:
    """Backtick-quote an expression, doubling every embedded backtick."""
    return "`" + latex.value.replace("`", "``") + "`"


def encode_latex_list(values: tuple[Latex, ...]) -> str:
    return "[" + ", ".join(encode_latex(v) for v in values) + "]"


def encode_interval(interval: Interval) -> str:
    def bound(value: Latex | None) -> str:
        return encode_latex(value) if value is not None else ""

    step = f":{bound(interval.step)}" if interval.step is not None else ""
    return f"[{bound(interval.min)}:{bound(interval.max)}{step}]"
