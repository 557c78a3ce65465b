"""Unit tests for desmos_text.exporters.dest."""

import pytest

from desmos_text.errors import InvariantError
from desmos_text.exporters.dest import (
    encode_column_line,
    encode_interval,
    encode_item_line,
    encode_latex,
    encode_line,
    encode_option_group,
    encode_string,
    export_dest,
)
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
    LinesOption,
    MinorSubdivisionsSetting,
    NameOption,
    NoteAffix,
    NumberInterval,
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


def _decode_string(text: str) -> str:
    assert text.startswith('"') and text.endswith('"')
    inner = text[1:-1]
    assert '"' not in inner.replace('""', "")
    return inner.replace('""', '"')


def _decode_latex(text: str) -> str:
    assert text.startswith("`") and text.endswith("`")
    inner = text[1:-1]
    assert "`" not in inner.replace("``", "")
    return inner.replace("``", "`")


def _expr_line(latex: str = "y=x", *groups, flags=()) -> ItemLine:
    return ItemLine(
        affix_group=ExprAffix(expr=Latex(latex)),
        small_flags=tuple(flags),
        option_groups=(IdOption(value="1"), *groups),
    )


# ── Literals ─────────────────────────────────────────────────────────


class TestEscaping:
    def test_plain_string(self) -> None:
        assert encode_string("abc") == '"abc"'

    def test_every_quote_is_doubled(self) -> None:
        assert encode_string('say "hi" and "bye"') == '"say ""hi"" and ""bye"""'

    @pytest.mark.parametrize("s", ["", '"', '""', 'a"b"c"d', 'end"', "no quotes"])
    def test_string_round_trip(self, s: str) -> None:
        assert _decode_string(encode_string(s)) == s

    def test_latex(self) -> None:
        assert encode_latex(Latex("y=x^2")) == "`y=x^2`"

    def test_every_backtick_is_doubled(self) -> None:
        assert encode_latex(Latex("a`b`c")) == "`a``b``c`"

    @pytest.mark.parametrize("e", ["", "`", "``x``", "\\frac{1}{2}`"])
    def test_latex_round_trip(self, e: str) -> None:
        assert _decode_latex(encode_latex(Latex(e))) == e

    def test_interval_all_bounds(self) -> None:
        interval = Interval(min=Latex("0"), max=Latex("10"), step=Latex("1"))
        assert encode_interval(interval) == "[`0`:`10`:`1`]"

    def test_interval_missing_bounds(self) -> None:
        assert encode_interval(Interval(max=Latex("5"))) == "[:`5`]"
        assert encode_interval(Interval()) == "[:]"


# ── Setting lines ────────────────────────────────────────────────────


class TestSettingLines:
    def test_seed(self) -> None:
        assert encode_line(SeedSetting(seed="abc")) == 'seed: "abc"'

    def test_flags(self) -> None:
        line = FlagsSetting(flags=("degrees", "hide grid"))
        assert encode_line(line) == "flags: degrees, hide grid"

    def test_viewport(self) -> None:
        line = ViewportSetting(x=NumberInterval(-10, 10), y=NumberInterval(-5, 5))
        assert encode_line(line) == "viewport: x [-10:10], y [-5:5]"

    def test_viewport_float_bounds(self) -> None:
        line = ViewportSetting(x=NumberInterval(-10.0, 2.5), y=NumberInterval(0.1, 1e-7))
        assert encode_line(line) == "viewport: x [-10:2.5], y [0.1:1e-7]"

    def test_minor_subdivisions(self) -> None:
        assert encode_line(MinorSubdivisionsSetting(y=5)) == "minor-subdivisions: y 5"

    def test_axis_steps(self) -> None:
        assert encode_line(AxisStepsSetting(x=2, y=0.5)) == "axis steps: x 2, y 0.5"

    def test_axis_arrows(self) -> None:
        line = AxisArrowsSetting(x=ArrowMode.NONE, y=ArrowMode.BOTH)
        assert encode_line(line) == "axis arrows: x -, y <->"
        assert encode_line(AxisArrowsSetting(x=ArrowMode.POSITIVE)) == "axis arrows: x ->"

    def test_axis_labels_quoted(self) -> None:
        line = AxisLabelsSetting(x="time", y='"v"')
        assert encode_line(line) == 'axis labels: x "time", y """v"""'

    def test_axes(self) -> None:
        assert encode_line(AxesSetting(y=ShowOrHide.HIDE)) == "axes: y hide"

    def test_axis_numbers_fixed_order(self) -> None:
        line = AxisNumbersSetting(polar=ShowOrHide.SHOW, x=ShowOrHide.HIDE)
        assert encode_line(line) == "axis numbers: x hide, polar show"

    def test_unknown_line_is_invariant_error(self) -> None:
        with pytest.raises(InvariantError):
            encode_line(object())  # type: ignore[arg-type]


# ── Item lines ───────────────────────────────────────────────────────


class TestItemLines:
    def test_expression_affix_precedes_options(self) -> None:
        assert encode_item_line(_expr_line(), "") == '`y=x` id: "1";'

    def test_options_separated(self) -> None:
        line = _expr_line("y=x", ColorOption(value="#c74440"))
        assert encode_item_line(line, "") == '`y=x` id: "1"; color: "#c74440";'

    def test_small_flags_space_separated(self) -> None:
        line = _expr_line("y=x", flags=(SmallFlag.SECRET, SmallFlag.HIDDEN))
        assert encode_item_line(line, "") == 'secret hidden `y=x` id: "1";'

    def test_flags_without_affix_text(self) -> None:
        line = ItemLine(
            affix_group=ExprAffix(),
            small_flags=(SmallFlag.SECRET,),
            option_groups=(IdOption(value="1"),),
        )
        assert encode_item_line(line, "") == 'secret id: "1";'

    def test_expression_without_options(self) -> None:
        line = ItemLine(affix_group=ExprAffix(expr=Latex("y=x")))
        assert encode_item_line(line, "") == "`y=x`"

    def test_image(self) -> None:
        line = ItemLine(
            affix_group=ImageAffix(image_url="https://example.com/a.png"),
            small_flags=(SmallFlag.FOREGROUND, SmallFlag.DRAGGABLE),
            option_groups=(IdOption(value="i"), NameOption(value="pic")),
        )
        assert encode_item_line(line, "") == (
            'foreground draggable image "https://example.com/a.png" '
            'id: "i"; name: "pic";'
        )

    def test_note(self) -> None:
        line = ItemLine(
            affix_group=NoteAffix(text='He said "hi" twice "hi"'),
            option_groups=(IdOption(value="n"),),
        )
        assert encode_item_line(line, "") == 'note "He said ""hi"" twice ""hi""" id: "n";'

    def test_note_without_text(self) -> None:
        line = ItemLine(affix_group=NoteAffix(), option_groups=(IdOption(value="n"),))
        assert encode_item_line(line, "") == 'note id: "n";'

    def test_indentation_prefix(self) -> None:
        assert encode_item_line(_expr_line(), "  ") == '  `y=x` id: "1";'


class TestBlocks:
    def test_empty_folder(self) -> None:
        line = ItemLine(affix_group=FolderAffix(), option_groups=(IdOption(value="f"),))
        assert encode_item_line(line, "") == 'id: "f"; folder { }'

    def test_folder_with_title_and_children(self) -> None:
        line = ItemLine(
            affix_group=FolderAffix(title="Group", children=(_expr_line(),)),
            small_flags=(SmallFlag.COLLAPSED,),
            option_groups=(IdOption(value="f"),),
        )
        assert encode_item_line(line, "") == (
            'id: "f"; collapsed folder "Group" {\n'
            '  `y=x` id: "1";\n'
            "}"
        )

    def test_folder_without_options(self) -> None:
        assert encode_item_line(ItemLine(affix_group=FolderAffix()), "") == "folder { }"

    def test_empty_table(self) -> None:
        line = ItemLine(affix_group=TableAffix(), option_groups=(IdOption(value="t"),))
        assert encode_item_line(line, "") == 'id: "t"; table { }'

    def test_table_columns(self) -> None:
        columns = (
            ColumnLine(values=(Latex("1"), Latex("2")), header=Latex("x_1")),
            ColumnLine(
                values=(Latex("3"),),
                small_flags=(SmallFlag.HIDDEN,),
                option_groups=(ColorOption(value="#000"), PointsOption(flags=("hide",))),
            ),
        )
        line = ItemLine(affix_group=TableAffix(columns=columns), option_groups=(IdOption(value="t"),))
        assert encode_item_line(line, "") == (
            'id: "t"; table {\n'
            "  [`1`, `2`]\n"
            '  hidden [`3`]; color: "#000"; points: hide\n'
            "}"
        )

    def test_nested_table_closing_brace_aligned(self) -> None:
        table = ItemLine(
            affix_group=TableAffix(columns=(ColumnLine(values=(Latex("1"),)),)),
        )
        folder = ItemLine(affix_group=FolderAffix(children=(table,)))
        assert encode_item_line(folder, "") == (
            "folder {\n"
            "  table {\n"
            "    [`1`]\n"
            "  }\n"
            "}"
        )

    def test_nested_simulation_closing_brace_at_column_zero(self) -> None:
        rules = (ClickableRule(id="r", assignment=Latex("a"), expression=Latex("1")),)
        simulation = ItemLine(affix_group=SimulationAffix(rules=rules))
        folder = ItemLine(affix_group=FolderAffix(children=(simulation,)))
        assert encode_item_line(folder, "") == (
            "folder {\n"
            "  simulation {\n"
            '    `a` <- `1`; id: "r"\n'
            "}\n"
            "}"
        )

    def test_rule_with_empty_id_keeps_id_suffix(self) -> None:
        rules = (ClickableRule(id="", assignment=Latex("a"), expression=Latex("1")),)
        line = ItemLine(affix_group=SimulationAffix(rules=rules))
        assert encode_item_line(line, "") == 'simulation {\n  `a` <- `1`; id: ""\n}'

    def test_empty_column(self) -> None:
        assert encode_column_line(ColumnLine(), "  ") == "  []"

    def test_empty_simulation(self) -> None:
        line = ItemLine(affix_group=SimulationAffix(), option_groups=(IdOption(value="s"),))
        assert encode_item_line(line, "") == 'id: "s"; simulation { }'

    def test_simulation_rules(self) -> None:
        rules = (
            ClickableRule(id="1", assignment=Latex("a"), expression=Latex("a+1")),
            ClickableRule(id=None, assignment=Latex("b"), expression=Latex("0")),
        )
        line = ItemLine(
            affix_group=SimulationAffix(rules=rules),
            small_flags=(SmallFlag.PLAYING,),
            option_groups=(IdOption(value="s"), FpsOption(value=Latex("30"))),
        )
        assert encode_item_line(line, "") == (
            'id: "s"; fps: `30`; playing simulation {\n'
            '  `a` <- `a+1`; id: "1"\n'
            "  `b` <- `0`\n"
            "}"
        )

    def test_empty_blocks_never_render_bare_newlines(self) -> None:
        for affix in (FolderAffix(), TableAffix(), SimulationAffix()):
            text = encode_item_line(ItemLine(affix_group=affix), "")
            assert "\n" not in text
            assert text.endswith("{ }")


# ── Option groups ────────────────────────────────────────────────────


class TestOptionGroups:
    def test_id(self) -> None:
        assert encode_option_group(IdOption(value='a"b'), "") == 'id: "a""b"'

    def test_color_with_var(self) -> None:
        group = ColorOption(value="#000", var=Latex("c"))
        assert encode_option_group(group, "") == 'color: "#000", var=`c`'

    def test_color_var_only(self) -> None:
        assert encode_option_group(ColorOption(var=Latex("c")), "") == "color: var=`c`"

    def test_label(self) -> None:
        group = LabelOption(
            value="Origin", size=Latex("2"), angle=Latex("\\pi"), flags=("show", "no outline")
        )
        assert encode_option_group(group, "") == (
            'label: "Origin", show, no outline, size=`2`, angle=`\\pi`'
        )

    def test_slider(self) -> None:
        group = SliderOption(
            value=Interval(min=Latex("0"), max=Latex("10"), step=Latex("1")),
            period=Latex("8000"),
            flags=("hard min", "once forward"),
        )
        assert encode_option_group(group, "") == (
            "slider: [`0`:`10`:`1`], hard min, once forward, period=`8000`"
        )

    def test_slider_flags_only(self) -> None:
        assert encode_option_group(SliderOption(flags=("left",)), "") == "slider: left"

    def test_domains(self) -> None:
        interval = Interval(min=Latex("0"), max=Latex("1"))
        assert encode_option_group(DomainOption(value=interval), "") == "domain: [`0`:`1`]"
        assert encode_option_group(PolarDomainOption(value=interval), "") == (
            "polar domain: [`0`:`1`]"
        )

    def test_cdf(self) -> None:
        group = CdfOption(value=Interval(min=Latex("1")), flags=("show",))
        assert encode_option_group(group, "") == "cdf: [`1`:], show"

    def test_regression(self) -> None:
        group = RegressionOption(
            parameters=(
                RegressionParameter(Latex("m"), 0.5),
                RegressionParameter(Latex("b"), 2.0),
            ),
            residual_variable=Latex("e_1"),
            flags=("log mode",),
        )
        assert encode_option_group(group, "") == (
            "regression: {`m`=0.5, `b`=2}, log mode, residuals=`e_1`"
        )

    def test_regression_empty_parameters(self) -> None:
        group = RegressionOption(flags=("log mode",))
        assert encode_option_group(group, "") == "regression: { }, log mode"

    def test_fps(self) -> None:
        assert encode_option_group(FpsOption(value=Latex("60")), "") == "fps: `60`"

    def test_clickable_rules(self) -> None:
        group = ClickableRulesOption(
            rules=(ClickableRule(id="r", assignment=Latex("a"), expression=Latex("1")),),
            flags=("disabled",),
        )
        assert encode_option_group(group, "") == (
            'clickable rules: {\n  `a` <- `1`; id: "r"\n}, disabled'
        )

    def test_clickable_rules_nested_closing_brace_at_column_zero(self) -> None:
        group = ClickableRulesOption(
            rules=(ClickableRule(id="r", assignment=Latex("a"), expression=Latex("1")),),
        )
        assert encode_option_group(group, "  ") == (
            'clickable rules: {\n    `a` <- `1`; id: "r"\n}'
        )

    def test_empty_clickable_rules(self) -> None:
        assert encode_option_group(ClickableRulesOption(), "") == "clickable rules: { }"

    def test_clickable_label_and_name(self) -> None:
        assert encode_option_group(ClickableLabelOption(value="go"), "") == (
            'clickable label: "go"'
        )
        assert encode_option_group(NameOption(value="pic"), "") == 'name: "pic"'

    @pytest.mark.parametrize("group,expected", [
        (DisplayOption(), "display: fraction"),
        (BinsAlignedOption(), "bins aligned: left"),
        (HistogramModeOption(flags=("relative",)), "histogram mode: relative"),
        (DragOption(flags=("xy",)), "drag: xy"),
        (DotplotOption(), "dotplot: binned x"),
    ])
    def test_flag_only_groups(self, group, expected) -> None:
        assert encode_option_group(group, "") == expected

    def test_points(self) -> None:
        group = PointsOption(flags=("show", "open"), opacity=Latex("0.5"), size=Latex("9"))
        assert encode_option_group(group, "") == (
            "points: show, open, opacity=`0.5`, size=`9`"
        )

    def test_lines(self) -> None:
        group = LinesOption(flags=("dashed",), width=Latex("5"))
        assert encode_option_group(group, "") == "lines: dashed, width=`5`"

    def test_fill_opacity_only(self) -> None:
        assert encode_option_group(FillOption(opacity=Latex("0.2")), "") == (
            "fill: opacity=`0.2`"
        )

    def test_boxplot(self) -> None:
        group = BoxplotOption(breadth=Latex("5"), offset=Latex("3"), flags=("aligned to y",))
        assert encode_option_group(group, "") == (
            "boxplot: aligned to y, breadth=`5`, offset=`3`"
        )

    def test_image(self) -> None:
        group = ImageOption(width=Latex("10"), center=Latex("(1,2)"), opacity=Latex("0.8"))
        assert encode_option_group(group, "") == (
            "image: width=`10`, center=`(1,2)`, opacity=`0.8`"
        )

    def test_group_with_nothing(self) -> None:
        assert encode_option_group(PointsOption(), "") == "points:"


# ── Programs ─────────────────────────────────────────────────────────


class TestExportDest:
    def test_lines_joined_by_newline(self) -> None:
        program = Program(lines=(
            SeedSetting(seed="abc"),
            ViewportSetting(x=NumberInterval(-10, 10), y=NumberInterval(-5, 5)),
            _expr_line(),
        ))
        assert export_dest(program) == (
            'seed: "abc"\n'
            "viewport: x [-10:10], y [-5:5]\n"
            '`y=x` id: "1";'
        )

    def test_empty_program(self) -> None:
        assert export_dest(Program()) == ""

    def test_no_trailing_newline(self) -> None:
        program = Program(lines=(SeedSetting(seed="s"),))
        assert not export_dest(program).endswith("\n")
