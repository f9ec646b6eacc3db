"""
mathnorm - math notation normalizer for AI chat answers.

Wraps bare LaTeX found in markdown prose in ``$`` delimiters so a
markdown+math renderer can typeset it.
"""

from mathnorm.normalizer import (
    MathNormalizer,
    normalize,
    explain,
    normalize_escapes,
)
from mathnorm.models import (
    NormalizerConfig,
    NormalizeReport,
    ProtectedSpan,
    CandidateSpan,
)
from mathnorm.commands import MATH_COMMANDS
from mathnorm.exceptions import (
    MathNormError,
    ConfigError,
    PlaceholderMismatchError,
)

__version__ = "1.0.0"

__all__ = [
    # Normalizer
    "MathNormalizer",
    "normalize",
    "explain",
    "normalize_escapes",
    "MATH_COMMANDS",
    # Models
    "NormalizerConfig",
    "NormalizeReport",
    "ProtectedSpan",
    "CandidateSpan",
    # Exceptions
    "MathNormError",
    "ConfigError",
    "PlaceholderMismatchError",
]
