"""Core data models for desmos-text: the DEST intermediate representation.

Every multi-shape construct is a closed union of frozen dataclasses.
Consumers dispatch on the concrete class and treat anything else as an
invariant violation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Literal, Union

from desmos_text.errors import InvariantError


@dataclass(frozen=True)
class Latex:
    """An opaque math expression, carried unparsed."""

    value: str


@dataclass(frozen=True)
class NumberInterval:
    start: float
    end: float


@dataclass(frozen=True)
class Interval:
    """An expression interval; every bound is independently optional."""

    min: Latex | None = None
    max: Latex | None = None
    step: Latex | None = None


class ArrowMode(Enum):
    NONE = "none"
    POSITIVE = "positive"
    BOTH = "both"


class ShowOrHide(Enum):
    SHOW = "show"
    HIDE = "hide"


class SmallFlag(Enum):
    """Bare keyword markers scoped to particular item kinds."""

    SECRET = "secret"
    HIDDEN = "hidden"
    FOREGROUND = "foreground"
    DRAGGABLE = "draggable"
    PLAYING = "playing"
    COLLAPSED = "collapsed"


# ── Setting lines ────────────────────────────────────────────────────


@dataclass(frozen=True)
class SeedSetting:
    key: ClassVar[str] = "seed"

    seed: str


@dataclass(frozen=True)
class FlagsSetting:
    """Graph-wide boolean toggles such as `degrees` or `hide grid`."""

    key: ClassVar[str] = "flags"

    flags: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.flags:
            raise InvariantError("flags setting requires at least one flag")


@dataclass(frozen=True)
class _AxisSetting:
    """Shared shape of the x/y(/polar) setting lines."""

    def __post_init__(self) -> None:
        values = [getattr(self, name, None) for name in ("x", "y", "polar")]
        if all(v is None for v in values):
            raise InvariantError(
                f"{type(self).__name__} requires at least one of x, y, or polar"
            )


@dataclass(frozen=True)
class ViewportSetting(_AxisSetting):
    key: ClassVar[str] = "viewport"

    x: NumberInterval | None = None
    y: NumberInterval | None = None


@dataclass(frozen=True)
class MinorSubdivisionsSetting(_AxisSetting):
    key: ClassVar[str] = "minor-subdivisions"

    x: float | None = None
    y: float | None = None


@dataclass(frozen=True)
class AxisStepsSetting(_AxisSetting):
    key: ClassVar[str] = "axis steps"

    x: float | None = None
    y: float | None = None


@dataclass(frozen=True)
class AxisArrowsSetting(_AxisSetting):
    key: ClassVar[str] = "axis arrows"

    x: ArrowMode | None = None
    y: ArrowMode | None = None


@dataclass(frozen=True)
class AxisLabelsSetting(_AxisSetting):
    key: ClassVar[str] = "axis labels"

    x: str | None = None
    y: str | None = None


@dataclass(frozen=True)
class AxesSetting(_AxisSetting):
    key: ClassVar[str] = "axes"

    x: ShowOrHide | None = None
    y: ShowOrHide | None = None


@dataclass(frozen=True)
class AxisNumbersSetting(_AxisSetting):
    key: ClassVar[str] = "axis numbers"

    x: ShowOrHide | None = None
    y: ShowOrHide | None = None
    polar: ShowOrHide | None = None


SettingLine = Union[
    SeedSetting,
    FlagsSetting,
    ViewportSetting,
    MinorSubdivisionsSetting,
    AxisStepsSetting,
    AxisArrowsSetting,
    AxisLabelsSetting,
    AxesSetting,
    AxisNumbersSetting,
]


# ── Clickable rules and table columns ────────────────────────────────


@dataclass(frozen=True)
class ClickableRule:
    """`assignment <- expression`, run when the owning object is clicked."""

    id: str | None
    assignment: Latex
    expression: Latex


@dataclass(frozen=True)
class RegressionParameter:
    parameter: Latex
    value: float


# ── Option groups ────────────────────────────────────────────────────

LabelFlag = Literal["show", "editable math", "editable text", "show on hover", "no outline"]
SliderFlag = Literal[
    "hard min", "hard max", "loop forward", "once forward", "forever forward", "left"
]
PointsFlag = Literal["show", "hide", "open", "cross"]
LinesFlag = Literal["show", "hide", "dashed", "dotted"]
FillFlag = Literal["show", "hide"]
DragFlag = Literal["x", "y", "xy"]
HistogramFlag = Literal["relative", "density"]
BoxplotFlag = Literal["include outliers", "aligned to y"]


@dataclass(frozen=True)
class IdOption:
    key: ClassVar[str] = "id"

    value: str


@dataclass(frozen=True)
class ColorOption:
    key: ClassVar[str] = "color"

    value: str | None = None
    var: Latex | None = None


@dataclass(frozen=True)
class LabelOption:
    key: ClassVar[str] = "label"

    value: str | None = None
    size: Latex | None = None
    angle: Latex | None = None
    flags: tuple[LabelFlag, ...] = ()


@dataclass(frozen=True)
class SliderOption:
    key: ClassVar[str] = "slider"

    value: Interval | None = None
    period: Latex | None = None
    flags: tuple[SliderFlag, ...] = ()


@dataclass(frozen=True)
class DomainOption:
    key: ClassVar[str] = "domain"

    value: Interval


@dataclass(frozen=True)
class PolarDomainOption:
    key: ClassVar[str] = "polar domain"

    value: Interval


@dataclass(frozen=True)
class CdfOption:
    key: ClassVar[str] = "cdf"

    value: Interval | None = None
    flags: tuple[Literal["show"], ...] = ()


@dataclass(frozen=True)
class RegressionOption:
    key: ClassVar[str] = "regression"

    parameters: tuple[RegressionParameter, ...] = ()
    residual_variable: Latex | None = None
    flags: tuple[Literal["log mode"], ...] = ()


@dataclass(frozen=True)
class FpsOption:
    key: ClassVar[str] = "fps"

    value: Latex


@dataclass(frozen=True)
class ClickableRulesOption:
    key: ClassVar[str] = "clickable rules"

    rules: tuple[ClickableRule, ...] = ()
    flags: tuple[Literal["disabled"], ...] = ()


@dataclass(frozen=True)
class ClickableLabelOption:
    key: ClassVar[str] = "clickable label"

    value: str


@dataclass(frozen=True)
class NameOption:
    key: ClassVar[str] = "name"

    value: str


@dataclass(frozen=True)
class DisplayOption:
    key: ClassVar[str] = "display"

    flags: tuple[Literal["fraction"], ...] = ("fraction",)


@dataclass(frozen=True)
class BinsAlignedOption:
    key: ClassVar[str] = "bins aligned"

    flags: tuple[Literal["left"], ...] = ("left",)


@dataclass(frozen=True)
class HistogramModeOption:
    key: ClassVar[str] = "histogram mode"

    flags: tuple[HistogramFlag, ...] = ()


@dataclass(frozen=True)
class DragOption:
    key: ClassVar[str] = "drag"

    flags: tuple[DragFlag, ...] = ()


@dataclass(frozen=True)
class PointsOption:
    key: ClassVar[str] = "points"

    flags: tuple[PointsFlag, ...] = ()
    opacity: Latex | None = None
    size: Latex | None = None


@dataclass(frozen=True)
class LinesOption:
    key: ClassVar[str] = "lines"

    flags: tuple[LinesFlag, ...] = ()
    opacity: Latex | None = None
    width: Latex | None = None


@dataclass(frozen=True)
class FillOption:
    key: ClassVar[str] = "fill"

    flags: tuple[FillFlag, ...] = ()
    opacity: Latex | None = None


@dataclass(frozen=True)
class BoxplotOption:
    key: ClassVar[str] = "boxplot"

    breadth: Latex | None = None
    offset: Latex | None = None
    flags: tuple[BoxplotFlag, ...] = ()


@dataclass(frozen=True)
class DotplotOption:
    key: ClassVar[str] = "dotplot"

    flags: tuple[Literal["binned x"], ...] = ("binned x",)


@dataclass(frozen=True)
class ImageOption:
    key: ClassVar[str] = "image"

    width: Latex | None = None
    height: Latex | None = None
    center: Latex | None = None
    angle: Latex | None = None
    opacity: Latex | None = None


OptionGroup = Union[
    IdOption,
    ColorOption,
    LabelOption,
    SliderOption,
    DomainOption,
    PolarDomainOption,
    CdfOption,
    RegressionOption,
    FpsOption,
    ClickableRulesOption,
    ClickableLabelOption,
    NameOption,
    DisplayOption,
    BinsAlignedOption,
    HistogramModeOption,
    DragOption,
    PointsOption,
    LinesOption,
    FillOption,
    BoxplotOption,
    DotplotOption,
    ImageOption,
]


@dataclass(frozen=True)
class ColumnLine:
    """One table column: its cells in row order plus styling."""

    values: tuple[Latex, ...] = ()
    header: Latex | None = None
    small_flags: tuple[SmallFlag, ...] = ()
    option_groups: tuple[OptionGroup, ...] = ()


# ── Affix groups and item lines ──────────────────────────────────────


@dataclass(frozen=True)
class FolderAffix:
    key: ClassVar[str] = "folder"

    children: tuple[ItemLine, ...] = ()
    title: str | None = None

    def __post_init__(self) -> None:
        for child in self.children:
            if isinstance(child.affix_group, FolderAffix):
                raise InvariantError("folders cannot contain folders")


@dataclass(frozen=True)
class TableAffix:
    key: ClassVar[str] = "table"

    columns: tuple[ColumnLine, ...] = ()


@dataclass(frozen=True)
class SimulationAffix:
    key: ClassVar[str] = "simulation"

    rules: tuple[ClickableRule, ...] = ()


@dataclass(frozen=True)
class ExprAffix:
    key: ClassVar[str] = "expr"

    expr: Latex | None = None


@dataclass(frozen=True)
class ImageAffix:
    key: ClassVar[str] = "image"

    image_url: str


@dataclass(frozen=True)
class NoteAffix:
    key: ClassVar[str] = "note"

    text: str | None = None


AffixGroup = Union[FolderAffix, TableAffix, SimulationAffix, ExprAffix, ImageAffix, NoteAffix]

# Block kinds render their option groups before the affix.
BLOCK_AFFIXES = (FolderAffix, TableAffix, SimulationAffix)


@dataclass(frozen=True)
class ItemLine:
    """A single visible graph object."""

    affix_group: AffixGroup
    small_flags: tuple[SmallFlag, ...] = ()
    option_groups: tuple[OptionGroup, ...] = ()


Line = Union[SettingLine, ItemLine]


@dataclass(frozen=True)
class Program:
    """A translated document: lines in top-to-bottom rendering order."""

    lines: tuple[Line, ...] = field(default_factory=tuple)

    @property
    def items(self) -> list[ItemLine]:
        return [line for line in self.lines if isinstance(line, ItemLine)]

    @property
    def settings(self) -> list[SettingLine]:
        return [line for line in self.lines if not isinstance(line, ItemLine)]


@dataclass
class ConverterConfig:
    """Converter configuration for desmos-text."""

    graph_flags: bool = False
    output_suffix: str = ".dest"
