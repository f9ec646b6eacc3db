# -*- coding: utf-8 -*-
"""
Candidate detection for bare LaTeX expressions.

Two independent passes over the placeholder-substituted text:

* the command scanner starts at every ``\\name`` token and walks forward
  over its arguments, scripts and adjoining operators;
* the bracket scanner picks whole ``(...)`` / ``[...]`` runs that hold a
  recognized command, which fixes the cases where a command sits deep
  inside an enclosure the first pass only partly covers.

Both passes skip anything at odd ``$`` parity, i.e. inside a formula whose
closing delimiter has not arrived yet.
"""

import logging
import re
import string
from bisect import bisect_left, bisect_right
from typing import Dict, FrozenSet, List, Optional

from mathnorm.models import CandidateSpan, NormalizerConfig

logger = logging.getLogger(__name__)


_COMMAND_RE = re.compile(r'\\([a-zA-Z]+)')
_COMMAND_START_RE = re.compile(r'\\[a-zA-Z]')
_GENERIC_SHAPE_RE = re.compile(r'\\[a-zA-Z]+[\s\d()\[\]]')
_BARE_WORD_END_RE = re.compile(r'[a-zA-Z]\s')
_DOLLAR_RE = re.compile(r'(?<!\\)\$')
_BRACKET_OPEN_RE = re.compile(r'(?<!\\)[(\[]')

_LETTERS = frozenset(string.ascii_letters)
_DIGITS = frozenset(string.digits)
_ALNUM = _LETTERS | _DIGITS
# Characters that may sit between two pieces of one expression
_OPERATOR_CHARS = frozenset('+-*/=<>≤≥≠±×÷,;:.')
# Next characters that keep a whitespace/operator run going
_CONTINUE_CHARS = frozenset('+-*/=<>≤≥≠±×÷,;:().')
# Characters right after a word that mark it as a variable (x^2, f(x))
_ATTACH_CHARS = frozenset('^_{([\\') | _DIGITS
_RELATION_CHARS = frozenset('+-*/=<>≤≥≠±×÷')
_SPECULATIVE_CHARS = frozenset('{([') | _DIGITS
_CLOSERS = {'{': '}', '(': ')', '[': ']'}


def dollar_positions(text: str) -> List[int]:
    """Offsets of unescaped ``$`` characters, ascending."""
    return [m.start() for m in _DOLLAR_RE.finditer(text)]


def in_open_formula(dollars: List[int], pos: int) -> bool:
    """True when an odd number of ``$`` precede ``pos``."""
    return bisect_left(dollars, pos) % 2 == 1


def has_known_command(text: str, commands: FrozenSet[str]) -> bool:
    return any(m.group(1) in commands for m in _COMMAND_RE.finditer(text))


class _Scanner:
    """Forward-only walker over the working text."""

    def __init__(self, text: str, sentinel: str, config: NormalizerConfig):
        self.text = text
        self.n = len(text)
        self.sentinel = sentinel
        self.window = config.continuation_window
        self.max_word = config.max_attached_word

    def peek(self, pos: int) -> str:
        return self.text[pos] if pos < self.n else ''

    def _blocked(self, ch: str) -> bool:
        return ch in ('$', '\n') or ch == self.sentinel

    def command_ahead(self, pos: int) -> bool:
        """True when a command token starts within the window, same line."""
        m = _COMMAND_START_RE.search(self.text, pos, pos + self.window)
        if not m:
            return False
        return not any(self._blocked(ch) for ch in self.text[pos:m.start()])

    def math_word(self, start: int, end: int) -> bool:
        """Whether a short letter run after whitespace still reads as math."""
        if self.peek(end) in _ATTACH_CHARS:
            return True
        if self.command_ahead(start):
            return True
        pos = end
        while pos < self.n and self.text[pos] in ' \t':
            pos += 1
        return self.peek(pos) in _RELATION_CHARS

    def skip_group(self, pos: int) -> Optional[int]:
        """
        Skip a balanced group opened at ``pos``.

        Returns:
            Offset just past the closing bracket, the end of the text when
            the group is still open there, or None when the group runs into
            a newline, a ``$`` or a placeholder
        """
        opener = self.text[pos]
        closer = _CLOSERS[opener]
        depth = 0
        i = pos
        while i < self.n:
            ch = self.text[i]
            if ch == '\\' and i + 1 < self.n and not self._blocked(self.text[i + 1]):
                i += 2
                continue
            if self._blocked(ch):
                return None
            if ch == opener:
                depth += 1
            elif ch == closer:
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return self.n

    def skip_script(self, pos: int) -> Optional[int]:
        """Skip ``^``/``_`` and its argument; None if there is no argument."""
        nxt = self.peek(pos + 1)
        if nxt == '{':
            return self.skip_group(pos + 1)
        if nxt and nxt in _ALNUM:
            return pos + 2
        return None

    def extend(self, pos: int) -> int:
        """
        Walk forward from the end of a command token.

        Returns:
            End offset of the expression. Whitespace and operators only
            count once something solid follows them.
        """
        text = self.text
        end = pos
        after_command = True
        after_space = False

        while pos < self.n:
            ch = text[pos]

            if ch in '{(' or (ch == '[' and after_command):
                group_end = self.skip_group(pos)
                if group_end is None:
                    break
                pos = end = group_end
                after_command = after_space = False
                continue

            if ch in '^_':
                script_end = self.skip_script(pos)
                if script_end is None:
                    pos += 1
                else:
                    pos = end = script_end
                after_command = after_space = False
                continue

            if ch == '\\':
                m = _COMMAND_RE.match(text, pos)
                if m:
                    pos = end = m.end()
                    after_command, after_space = True, False
                    continue
                nxt = self.peek(pos + 1)
                if nxt and not nxt.isspace() and not self._blocked(nxt):
                    # \, \; \{ \| and friends
                    pos = end = pos + 2
                    after_command = after_space = False
                    continue
                break

            if ch in _DIGITS:
                pos = end = pos + 1
                after_command = after_space = False
                continue

            if ch in _LETTERS:
                word_end = pos
                while word_end < self.n and text[word_end] in _LETTERS:
                    word_end += 1
                if word_end - pos > self.max_word:
                    break
                if after_space and not self.math_word(pos, word_end):
                    break
                pos = end = word_end
                after_command = after_space = False
                continue

            if ch != '\n' and (ch.isspace() or ch in _OPERATOR_CHARS):
                pos += 1
                after_command = False
                after_space = ch.isspace()
                if self.command_ahead(pos):
                    continue
                if self.peek(pos) in _CONTINUE_CHARS:
                    continue
                if _BARE_WORD_END_RE.match(text, pos):
                    break
                continue

            break

        return end


def scan_commands(
    text: str,
    commands: FrozenSet[str],
    config: NormalizerConfig,
    sentinel: str,
    dollars: Optional[List[int]] = None
) -> List[CandidateSpan]:
    """
    Find bare expressions that start at a command token.

    Args:
        text: Placeholder-substituted working text
        commands: Recognized command names
        config: Heuristic settings
        sentinel: Placeholder sentinel character
        dollars: Precomputed dollar_positions(text)

    Returns:
        Non-overlapping candidates in ascending start order
    """
    if dollars is None:
        dollars = dollar_positions(text)

    scanner = _Scanner(text, sentinel, config)
    candidates: List[CandidateSpan] = []
    covered_until = 0

    for m in _COMMAND_RE.finditer(text):
        start = m.start()
        if start < covered_until or in_open_formula(dollars, start):
            continue

        if m.group(1) not in commands:
            lookahead = text[m.end():m.end() + 2]
            if not any(ch in _SPECULATIVE_CHARS or ch.isspace() for ch in lookahead):
                continue

        end = scanner.extend(m.end())
        expression = text[start:end].strip()
        if not expression:
            continue
        if not (has_known_command(expression, commands) or _GENERIC_SHAPE_RE.search(expression)):
            continue

        candidates.append(CandidateSpan(start=start, end=end, text=expression, source="command"))
        covered_until = end

    logger.debug(f"Command scanner: {len(candidates)} candidates")
    return candidates


def bracket_ends(text: str) -> Dict[int, int]:
    """
    Map every unescaped ``(`` / ``[`` to the end offset of its run.

    Openers and closers share one stack, so ``[0, \\pi)`` is a run. Openers
    still open at a newline or at the end of the text are left out.
    """
    ends: Dict[int, int] = {}
    stack: List[int] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '\\' and i + 1 < n and text[i + 1] in '()[]':
            i += 2
            continue
        if ch == '\n':
            stack.clear()
        elif ch in '([':
            stack.append(i)
        elif ch in ')]' and stack:
            ends[stack.pop()] = i + 1
        i += 1
    return ends


def _inside_command_span(spans: List[CandidateSpan], starts: List[int], start: int, end: int) -> bool:
    idx = bisect_right(starts, start) - 1
    return idx >= 0 and spans[idx].end >= end


def scan_brackets(
    text: str,
    commands: FrozenSet[str],
    command_spans: List[CandidateSpan],
    sentinel: str,
    dollars: Optional[List[int]] = None
) -> List[CandidateSpan]:
    """
    Find ``(...)`` / ``[...]`` runs that contain a recognized command.

    The candidate covers the whole run, its text is the inner content
    without the outer brackets. Runs lying inside a command-scanner span
    are left to that span.
    """
    if dollars is None:
        dollars = dollar_positions(text)

    starts = [span.start for span in command_spans]
    ends = bracket_ends(text)
    candidates: List[CandidateSpan] = []
    pos = 0

    while True:
        m = _BRACKET_OPEN_RE.search(text, pos)
        if not m:
            break
        start = m.start()
        end = ends.get(start)
        if end is None:
            pos = start + 1
            continue

        inner = text[start + 1:end - 1]
        if not has_known_command(inner, commands):
            pos = end
            continue
        if _inside_command_span(command_spans, starts, start, end):
            pos = end
            continue
        if '$' in inner or sentinel in inner or in_open_formula(dollars, start):
            # a nested run may still qualify
            pos = start + 1
            continue

        candidates.append(CandidateSpan(start=start, end=end, text=inner, source="bracket"))
        pos = end

    logger.debug(f"Bracket scanner: {len(candidates)} candidates")
    return candidates
