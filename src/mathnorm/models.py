"""
Pydantic models for the normalization pipeline.
"""

from typing import Optional, List, Literal
from pydantic import BaseModel, Field


# ===== SPAN MODELS =====

class ProtectedSpan(BaseModel):
    """Text shielded from the scanners behind a placeholder."""
    placeholder: str
    original: str
    kind: Literal["inline", "block", "code"] = "inline"


class CandidateSpan(BaseModel):
    """A range of the working text that should become inline math."""
    start: int
    end: int
    text: str
    source: Literal["command", "bracket"] = "command"

    def contains(self, other: "CandidateSpan") -> bool:
        return self.start <= other.start and other.end <= self.end


# ===== CONFIG MODELS =====

class NormalizerConfig(BaseModel):
    """Normalizer settings."""
    protect_code: bool = Field(
        default=True,
        description="Leave fenced code blocks and inline code untouched"
    )
    extra_commands: List[str] = Field(
        default_factory=list,
        description="Additional command names treated as math (without backslash)"
    )
    continuation_window: int = Field(
        default=10,
        ge=0,
        description="How far ahead a command token keeps a whitespace/operator run alive"
    )
    max_attached_word: int = Field(
        default=2,
        ge=0,
        description="Longest letter run glued to an expression that is still math (e.g. dx)"
    )
    max_input_length: Optional[int] = Field(
        default=None,
        ge=0,
        description="Inputs longer than this are returned unchanged (None = no limit)"
    )


# ===== REPORT MODELS =====

class NormalizeReport(BaseModel):
    """Output of a normalization run together with its intermediate spans."""
    input: str
    output: str
    protected: List[ProtectedSpan] = []
    command_candidates: List[CandidateSpan] = []
    bracket_candidates: List[CandidateSpan] = []
    accepted: List[CandidateSpan] = []

    @property
    def changed(self) -> bool:
        return self.input != self.output
