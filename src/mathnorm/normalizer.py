# -*- coding: utf-8 -*-
"""
Math notation normalizer.

Rewrites AI-generated markdown so that a markdown+math renderer
(``$...$`` inline, ``$$...$$`` block) typesets bare LaTeX correctly.
"""

import logging
import re
from typing import List, Optional, Tuple

from mathnorm.commands import build_command_set
from mathnorm.models import CandidateSpan, NormalizerConfig, NormalizeReport
from mathnorm.protect import pick_sentinel, protect_code, protect_math, restore_placeholders
from mathnorm.scanner import dollar_positions, has_known_command, scan_brackets, scan_commands

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Escape normalization
# ---------------------------------------------------------------------------

_BACKSLASH_RUN_RE = re.compile(r'\\{2,}')
_INLINE_BRACKET_RE = re.compile(r'\\\((.*?)\\\)', re.DOTALL)
_BLOCK_BRACKET_RE = re.compile(r'\\\[(.*?)\\\]', re.DOTALL)
_STRAY_BACKSLASH_RE = re.compile(r'\\\s')
_BRACKET_DELIMITER_RE = re.compile(r'\\[()\[\]]')


def _delimited(delimiter: str):
    # Nested \( \[ \) \] inside the body are dropped so that no pair is
    # left over for a later call to convert
    def _replacer(m):
        body = _BRACKET_DELIMITER_RE.sub('', m.group(1))
        return f'{delimiter}{body}{delimiter}'
    return _replacer


def normalize_escapes(text: str) -> str:
    """Collapse doubled backslashes and convert \\( \\) / \\[ \\] delimiters."""
    if '\\' not in text:
        return text

    # \\sin -> \sin
    text = _BACKSLASH_RUN_RE.sub(lambda m: '\\', text)
    # \(...\) -> $...$
    text = _INLINE_BRACKET_RE.sub(_delimited('$'), text)
    # \[...\] -> $$...$$
    text = _BLOCK_BRACKET_RE.sub(_delimited('$$'), text)
    # Trailing " \ " artifacts break the renderer
    text = _STRAY_BACKSLASH_RE.sub('', text)
    return text


# ---------------------------------------------------------------------------
# Span merging
# ---------------------------------------------------------------------------

def resolve_overlaps(
    command_spans: List[CandidateSpan],
    bracket_spans: List[CandidateSpan]
) -> List[CandidateSpan]:
    """
    Pick a pairwise non-overlapping subset of candidates.

    A bracket run wins over the command spans it encloses. A bracket run
    that only partly overlaps a command span is dropped.

    Both lists are ascending and free of overlaps among themselves, so
    one forward sweep over each is enough.
    """
    brackets: List[CandidateSpan] = []
    first = 0
    for bracket in bracket_spans:
        while first < len(command_spans) and command_spans[first].end <= bracket.start:
            first += 1
        i = first
        while i < len(command_spans) and command_spans[i].start < bracket.end:
            if not bracket.contains(command_spans[i]):
                break
            i += 1
        else:
            brackets.append(bracket)

    accepted: List[CandidateSpan] = []
    b = 0
    for span in command_spans:
        while b < len(brackets) and brackets[b].end <= span.start:
            accepted.append(brackets[b])
            b += 1
        if b < len(brackets) and brackets[b].start < span.end:
            continue
        accepted.append(span)
    accepted.extend(brackets[b:])
    return accepted


def merge_spans(
    text: str,
    command_spans: List[CandidateSpan],
    bracket_spans: List[CandidateSpan],
    sentinel: str
) -> Tuple[str, List[CandidateSpan]]:
    """
    Wrap accepted candidates in ``$`` delimiters.

    Spans are applied from the highest start offset down so the offsets of
    the remaining ones stay valid. A span whose neighbour is already a
    ``$`` (or a placeholder, which restores to one) is left alone.

    Returns:
        New text and the spans that were actually wrapped, ascending
    """
    accepted = resolve_overlaps(command_spans, bracket_spans)
    if not accepted:
        return text, []

    delimiters = ('$', sentinel)
    pieces: List[str] = []
    applied: List[CandidateSpan] = []
    cursor = len(text)

    for span in reversed(accepted):
        before = text[span.start - 1] if span.start > 0 else ''
        after = text[span.end] if span.end < len(text) else ''
        if before in delimiters or after in delimiters:
            continue
        if applied and span.end == applied[-1].start:
            continue
        body = span.text.strip()
        if not body:
            continue

        pieces.append(text[span.end:cursor])
        pieces.append(f'${body}$')
        cursor = span.start
        applied.append(span)

    pieces.append(text[:cursor])
    applied.reverse()
    return ''.join(reversed(pieces)), applied


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class MathNormalizer:
    """
    Detects bare LaTeX in markdown and wraps it in math delimiters.

    Example:

    ```python
    normalizer = MathNormalizer(NormalizerConfig(extra_commands=["grad"]))
    normalizer.normalize(r"Compute \\sin(x) now")   # 'Compute $\\sin(x)$ now'
    ```
    """

    def __init__(self, config: Optional[NormalizerConfig] = None):
        self.config = config or NormalizerConfig()
        self.commands = build_command_set(self.config.extra_commands)

    def normalize(self, text: str) -> str:
        """Return ``text`` with bare math wrapped. Never raises."""
        return self.explain(text).output

    def explain(self, text: str) -> NormalizeReport:
        """Run the pipeline and keep every intermediate span."""
        if not text or '\\' not in text:
            return NormalizeReport(input=text, output=text)

        limit = self.config.max_input_length
        if limit is not None and len(text) > limit:
            logger.warning(f"Input of {len(text)} chars exceeds limit {limit}, left unchanged")
            return NormalizeReport(input=text, output=text)

        try:
            return self._run(text)
        except Exception:
            logger.exception("Math normalization failed, returning input unchanged")
            return NormalizeReport(input=text, output=text)

    def _run(self, text: str) -> NormalizeReport:
        sentinel = pick_sentinel(text)
        working = text

        # 0. Code blocks and inline code
        code_spans = []
        if self.config.protect_code:
            working, code_spans = protect_code(working, sentinel)

        # 1. Escapes and \( \) / \[ \] delimiters
        working = normalize_escapes(working)

        # 2. Already-delimited formulas
        working, math_spans = protect_math(working, sentinel)

        command_spans: List[CandidateSpan] = []
        bracket_spans: List[CandidateSpan] = []
        applied: List[CandidateSpan] = []

        # Nothing to do unless a recognized command is left outside formulas
        if has_known_command(working, self.commands):
            dollars = dollar_positions(working)

            # 3. Command tokens
            command_spans = scan_commands(working, self.commands, self.config, sentinel, dollars)

            # 4. Bracketed runs
            bracket_spans = scan_brackets(working, self.commands, command_spans, sentinel, dollars)

            # 5. Overlaps and delimiters
            working, applied = merge_spans(working, command_spans, bracket_spans, sentinel)

        # 6. Restore, formulas first since they may hold code placeholders
        working = restore_placeholders(working, math_spans, sentinel)
        working = restore_placeholders(working, code_spans, sentinel)

        logger.debug(
            f"Normalized {len(text)} chars: {len(math_spans)} formulas and "
            f"{len(code_spans)} code spans protected, {len(applied)} expressions wrapped"
        )

        return NormalizeReport(
            input=text,
            output=working,
            protected=code_spans + math_spans,
            command_candidates=command_spans,
            bracket_candidates=bracket_spans,
            accepted=applied,
        )


_default_normalizer: Optional[MathNormalizer] = None


def get_normalizer() -> MathNormalizer:
    """Shared normalizer with the default configuration."""
    global _default_normalizer

    if _default_normalizer is None:
        _default_normalizer = MathNormalizer()

    return _default_normalizer


def normalize(text: str, config: Optional[NormalizerConfig] = None) -> str:
    """
    Wrap bare LaTeX in ``$`` delimiters and convert \\( \\) / \\[ \\].

    Args:
        text: Markdown text, possibly a partial stream chunk
        config: Settings; the defaults when omitted

    Returns:
        Text ready for a markdown+math renderer
    """
    normalizer = MathNormalizer(config) if config is not None else get_normalizer()
    return normalizer.normalize(text)


def explain(text: str, config: Optional[NormalizerConfig] = None) -> NormalizeReport:
    """Same as normalize() but returns the intermediate spans too."""
    normalizer = MathNormalizer(config) if config is not None else get_normalizer()
    return normalizer.explain(text)
