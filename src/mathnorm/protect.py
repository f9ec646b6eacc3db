# -*- coding: utf-8 -*-
"""
Placeholder system for protecting already-delimited math and code.

Protected regions are cut out of the working text and replaced by
index-tagged placeholders built around a sentinel character that does not
occur in the input. The scanners never look inside a placeholder, and the
restorer puts every original back in a single pass.
"""

import logging
import re
from collections import Counter
from itertools import chain
from typing import Dict, List, Tuple

from mathnorm.exceptions import MathNormError, PlaceholderMismatchError
from mathnorm.models import ProtectedSpan

logger = logging.getLogger(__name__)


_CODE_TAG = 'CODE'
_FORMULA_INLINE_TAG = 'FORMULAINLINE'
_FORMULA_BLOCK_TAG = 'FORMULABLOCK'

_CODE_BLOCK_RE = re.compile(r'```\w*\n.*?```', re.DOTALL)
_INLINE_CODE_RE = re.compile(r'`[^`\n]+?`')

# $$...$$ is tried first where a region opens with two dollars, otherwise
# $...$ on a single line. Escaped \$ never opens or closes a formula.
_FORMULA_RE = re.compile(
    r'(?<!\\)\$\$(?P<block>(?:\\.|[^$\\])+?)\$\$'
    r'|(?<!\\)\$(?P<inline>(?:\\[^\n]|[^$\\\n])+?)\$',
    re.DOTALL,
)


def pick_sentinel(text: str) -> str:
    """Return a character that does not occur in ``text``."""
    for code in chain((0,), range(0xE000, 0xF900)):
        ch = chr(code)
        if ch not in text:
            return ch
    raise MathNormError("No free sentinel character for placeholders")


def make_placeholder(sentinel: str, tag: str, index: int) -> str:
    return f'{sentinel}{tag}_{index}{sentinel}'


def _placeholder_re(sentinel: str) -> re.Pattern:
    s = re.escape(sentinel)
    return re.compile(f'{s}[A-Z]+_\\d+{s}')


def protect_code(text: str, sentinel: str) -> Tuple[str, List[ProtectedSpan]]:
    """Extract fenced code blocks and inline code spans into placeholders."""
    spans: List[ProtectedSpan] = []

    def _replacer(m):
        placeholder = make_placeholder(sentinel, _CODE_TAG, len(spans))
        spans.append(ProtectedSpan(placeholder=placeholder, original=m.group(0), kind="code"))
        return placeholder

    text = _CODE_BLOCK_RE.sub(_replacer, text)
    text = _INLINE_CODE_RE.sub(_replacer, text)
    return text, spans


def protect_math(text: str, sentinel: str) -> Tuple[str, List[ProtectedSpan]]:
    """Extract ``$...$`` and ``$$...$$`` formulas into placeholders.

    A dangling dollar that has no partner is left in the text as is.
    """
    spans: List[ProtectedSpan] = []

    def _replacer(m):
        if m.group('block') is not None:
            tag, kind = _FORMULA_BLOCK_TAG, "block"
        else:
            tag, kind = _FORMULA_INLINE_TAG, "inline"
        placeholder = make_placeholder(sentinel, tag, len(spans))
        spans.append(ProtectedSpan(placeholder=placeholder, original=m.group(0), kind=kind))
        return placeholder

    text = _FORMULA_RE.sub(_replacer, text)
    return text, spans


def restore_placeholders(
    text: str,
    spans: List[ProtectedSpan],
    sentinel: str,
    strict: bool = False
) -> str:
    """
    Put the original text of every protected span back.

    Args:
        text: Working text containing placeholders
        spans: Spans produced by protect_code / protect_math
        sentinel: Sentinel character the placeholders were built with
        strict: Raise PlaceholderMismatchError instead of only logging

    Returns:
        Text with all known placeholders substituted
    """
    if not spans:
        return text

    originals: Dict[str, str] = {span.placeholder: span.original for span in spans}
    seen: Counter = Counter()

    def _replacer(m):
        placeholder = m.group(0)
        if placeholder not in originals:
            return placeholder
        seen[placeholder] += 1
        return originals[placeholder]

    restored = _placeholder_re(sentinel).sub(_replacer, text)

    for placeholder in originals:
        count = seen[placeholder]
        if count != 1:
            logger.error(f"Placeholder {placeholder!r} restored {count} times")
            if strict:
                raise PlaceholderMismatchError(placeholder, count)

    return restored
