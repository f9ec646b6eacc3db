"""Tests for the command and bracket scanners."""

import pytest

from mathnorm.commands import MATH_COMMANDS, build_command_set
from mathnorm.models import NormalizerConfig
from mathnorm.scanner import (
    bracket_ends,
    dollar_positions,
    has_known_command,
    in_open_formula,
    scan_brackets,
    scan_commands,
)

S = "\x00"


def commands_in(text, config=None):
    return scan_commands(text, MATH_COMMANDS, config or NormalizerConfig(), S)


def texts(spans):
    return [span.text for span in spans]


# ----------------------------------------------------------
# HELPERS
# ----------------------------------------------------------

class TestHelpers:
    """Dollar parity and command lookup."""

    def test_dollar_positions_skip_escaped(self):
        assert dollar_positions(r"$a$ \$ $") == [0, 2, 7]

    def test_open_formula_parity(self):
        dollars = dollar_positions("$x and y")
        assert in_open_formula(dollars, 3) is True
        assert in_open_formula(dollars, 0) is False

    def test_has_known_command(self):
        assert has_known_command(r"see \alpha", MATH_COMMANDS)
        assert not has_known_command(r"C:\Users\bob", MATH_COMMANDS)

    def test_extended_command_set(self):
        commands = build_command_set(["grad", "\\curl"])
        assert "grad" in commands
        assert "curl" in commands
        assert "frac" in commands
        assert build_command_set() is MATH_COMMANDS


# ----------------------------------------------------------
# COMMAND SCANNER
# ----------------------------------------------------------

class TestCommandScanner:
    """Expansion of a command token into an expression."""

    def test_stops_before_prose(self):
        spans = commands_in(r"Compute \sin(x) now")

        assert len(spans) == 1
        assert spans[0].text == r"\sin(x)"
        assert (spans[0].start, spans[0].end) == (8, 15)
        assert spans[0].source == "command"

    def test_joins_operators_between_commands(self):
        text = r"\frac{1}{2} + \frac{1}{3}"
        spans = commands_in(text)

        assert texts(spans) == [text]

    def test_bare_letter_after_space_ends_expression(self):
        assert texts(commands_in(r"where \alpha is the angle")) == [r"\alpha"]

    def test_variable_after_space_joins_next_command(self):
        text = r"\sum_{i=1}^{n} i = \frac{n(n+1)}{2}"
        assert texts(commands_in(text)) == [text]

    def test_variables_after_space_in_integral(self):
        spans = commands_in(r"\int_0^1 x^2 dx = 1/3 done")

        assert texts(spans) == [r"\int_0^1 x^2 dx = 1/3"]

    def test_short_word_before_prose_is_not_math(self):
        assert texts(commands_in(r"if \alpha is small")) == [r"\alpha"]

    def test_command_window_stops_at_newline(self):
        assert texts(commands_in("\\alpha x\n\\beta")) == [r"\alpha", r"\beta"]

    def test_optional_argument(self):
        assert texts(commands_in(r"so \sqrt[3]{8} is two")) == [r"\sqrt[3]{8}"]

    def test_scripts(self):
        assert texts(commands_in(r"\sum_{i=1}^n i")) == [r"\sum_{i=1}^n"]

    def test_attached_variable_and_trailing_terms(self):
        assert texts(commands_in(r"\frac{1}{2}x + 3")) == [r"\frac{1}{2}x + 3"]

    def test_long_attached_word_is_prose(self):
        assert texts(commands_in(r"\sin(x)now")) == [r"\sin(x)"]

    def test_attached_word_limit_is_configurable(self):
        config = NormalizerConfig(max_attached_word=0)
        assert texts(commands_in(r"\frac{1}{2}x", config)) == [r"\frac{1}{2}"]

    def test_trailing_period_not_included(self):
        assert texts(commands_in(r"equals \frac{1}{2}.")) == [r"\frac{1}{2}"]

    def test_spacing_commands_are_part_of_expression(self):
        assert texts(commands_in(r"\frac{a}{b}\,dx")) == [r"\frac{a}{b}\,dx"]

    def test_newline_ends_expression(self):
        spans = commands_in("\\alpha\n\\beta")

        assert texts(spans) == [r"\alpha", r"\beta"]

    def test_truncated_group_runs_to_end(self):
        spans = commands_in(r"\frac{1")

        assert texts(spans) == [r"\frac{1"]
        assert spans[0].end == len(r"\frac{1")

    def test_unknown_command_with_argument(self):
        assert texts(commands_in(r"\foo(3) here")) == [r"\foo(3)"]

    @pytest.mark.parametrize("text", [
        r"see \foo, then",
        r"see \foo bar",
        r"path C:\Users\bob",
    ])
    def test_unknown_command_without_math_shape(self, text):
        assert commands_in(text) == []

    def test_inside_open_formula_skipped(self):
        assert commands_in(r"costs $5 and \alpha") == []

    def test_candidates_do_not_overlap(self):
        spans = commands_in(r"\left(\frac{a}{b}\right)^2 and \pi")

        assert texts(spans) == [r"\left(\frac{a}{b}\right)^2", r"\pi"]
        assert spans[0].end <= spans[1].start

    def test_stops_at_placeholder(self):
        text = f"\\alpha{S}FORMULAINLINE_0{S}"
        assert texts(commands_in(text)) == [r"\alpha"]


# ----------------------------------------------------------
# BRACKET SCANNER
# ----------------------------------------------------------

class TestBracketScanner:
    """Whole bracketed runs holding a command."""

    def brackets_in(self, text):
        command_spans = commands_in(text)
        return scan_brackets(text, MATH_COMMANDS, command_spans, S)

    def test_enclosing_parentheses(self):
        spans = self.brackets_in(r"(\cos(6x))")

        assert len(spans) == 1
        assert (spans[0].start, spans[0].end) == (0, 10)
        assert spans[0].text == r"\cos(6x)"
        assert spans[0].source == "bracket"

    def test_run_with_several_commands(self):
        spans = self.brackets_in(r"so (\frac{1}{6} x + \alpha y) holds")

        assert texts(spans) == [r"\frac{1}{6} x + \alpha y"]

    def test_mixed_brackets(self):
        assert texts(self.brackets_in(r"on [0, \pi) only")) == [r"0, \pi"]

    def test_run_inside_command_span_skipped(self):
        assert self.brackets_in(r"\frac{1}{2}(\alpha + 1)") == []

    def test_run_without_command_skipped(self):
        assert self.brackets_in(r"(x + 1) and \alpha") == []

    def test_run_with_dollar_rejected(self):
        assert self.brackets_in(r"(\alpha costs $5)") == []

    def test_nested_run_considered_when_outer_rejected(self):
        text = f"(see {S}FORMULAINLINE_0{S} and (\\alpha))"
        assert texts(self.brackets_in(text)) == [r"\alpha"]

    def test_unclosed_bracket_ignored(self):
        assert self.brackets_in("(\\alpha\nmore)") == []

    def test_inner_run_of_unclosed_outer(self):
        assert texts(self.brackets_in(r"((\alpha) more")) == [r"\alpha"]

    def test_many_unclosed_brackets(self):
        text = "(" * 20000 + r"(\alpha)"
        spans = self.brackets_in(text)

        assert [(span.start, span.end) for span in spans] == [(20000, 20008)]


class TestBracketEnds:
    """Run ends for every opener."""

    def test_nested_runs(self):
        assert bracket_ends("(a(b)c)") == {0: 7, 2: 5}

    def test_mixed_brackets_share_depth(self):
        assert bracket_ends(r"[0, \pi)") == {0: 8}

    def test_unclosed_opener_left_out(self):
        assert bracket_ends("((a)") == {1: 4}

    def test_newline_closes_nothing(self):
        assert bracket_ends("(a\nb)") == {}

    def test_escaped_brackets_skipped(self):
        assert bracket_ends(r"(\(a)") == {0: 5}
