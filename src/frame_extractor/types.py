"""Core types."""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable


# ── Errors ───────────────────────────────────────────────────────────

class ExtractionError(Exception):
    """Base class for errors surfaced to the caller of a single request."""


class DecodeError(ExtractionError, ValueError):
    """Malformed hex/base64 input."""


class UnknownDelimiter(ExtractionError, LookupError):
    """Delimiter name not in the catalog."""


class InvalidCustomDelimiter(ExtractionError, ValueError):
    """Custom delimiter value is not a valid byte."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


# ── Catalog entries ──────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class DelimiterPair:
    """A named start/end byte combination framing a message."""
    id: str
    name: str              # e.g. "SOH/ETX"
    start_byte: int
    end_byte: int
    description: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "startChar": self.start_byte,
            "endChar": self.end_byte,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class ControlCharacter:
    """One ASCII control character (0x00-0x1F, 0x7F)."""
    code: int
    abbreviation: str
    full_name: str
    description: str

    @property
    def display(self) -> str:
        return f"0x{self.code:02X} ({self.abbreviation})"


# ── Configuration ────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Per-request extraction settings.

    Frozen so one instance can be handed to every concurrent extractor
    without copying.  Use ``dataclasses.replace`` (or ``with_bounds``) to
    derive a variant.
    """
    start_bytes: frozenset[int] = frozenset({0x01, 0x02})   # SOH, STX
    end_bytes: frozenset[int] = frozenset({0x03, 0x04})     # ETX, EOT
    min_length: int = 1
    max_length: int = 10000
    ascii_only: bool = False
    delimiter: DelimiterPair | None = None

    def __post_init__(self) -> None:
        # Accept any iterable of ints and freeze it
        object.__setattr__(self, "start_bytes", frozenset(self.start_bytes))
        object.__setattr__(self, "end_bytes", frozenset(self.end_bytes))
        for b in self.start_bytes | self.end_bytes:
            if not 0 <= b <= 0xFF:
                raise ValueError(f"delimiter byte out of range: {b!r}")
        if self.min_length < 0:
            raise ValueError("min_length must be >= 0")
        if self.max_length < self.min_length:
            raise ValueError("max_length must be >= min_length")

    @classmethod
    def from_delimiter(cls, pair: DelimiterPair, **overrides) -> SearchConfig:
        """Config framed by a single preset pair."""
        return cls(
            start_bytes=frozenset({pair.start_byte}),
            end_bytes=frozenset({pair.end_byte}),
            delimiter=pair,
            **overrides,
        )

    @classmethod
    def from_custom(cls, start: str | int, end: str | int, **overrides) -> SearchConfig:
        """Config framed by custom byte values such as ``"0x01"``/``"0x03"``."""
        from .delimiters import custom_pair
        return cls.from_delimiter(custom_pair(start, end), **overrides)

    def with_bounds(self, min_length: int, max_length: int) -> SearchConfig:
        return replace(self, min_length=min_length, max_length=max_length)

    def accepts(self, text: str) -> bool:
        """Length filter on the decoded character count."""
        return self.min_length <= len(text) <= self.max_length


# ── Methods ──────────────────────────────────────────────────────────

class ExtractionMethod(str, Enum):
    """Extraction strategies.  Values are the wire names."""
    SIGNALING_STRICT = "signalingStrict"
    SIGNALING_FLEXIBLE = "signalingFlexible"
    REGULAR_EXPRESSION = "regularExpression"
    BIT_BY_BIT_SCAN = "bitByBitScan"
    HYBRID_MODE = "hybridMode"      # selector only, never a result
    EXPERIMENTAL_PROTOCOL = "experimentalProtocol"

    @classmethod
    def concrete(cls) -> tuple[ExtractionMethod, ...]:
        """Methods that have an extractor of their own."""
        return tuple(m for m in cls if m is not cls.HYBRID_MODE)

    @property
    def display_name(self) -> str:
        return _METHOD_INFO[self][0]

    @property
    def description(self) -> str:
        return _METHOD_INFO[self][1]

    @property
    def rank(self) -> int:
        """Position in declaration order, for stable sorting."""
        return list(ExtractionMethod).index(self)


_METHOD_INFO: dict[ExtractionMethod, tuple[str, str]] = {
    ExtractionMethod.SIGNALING_STRICT: (
        "Signaling Strict", "Requires exact framing with start/end characters"),
    ExtractionMethod.SIGNALING_FLEXIBLE: (
        "Signaling Flexible", "Permissive signaling character detection"),
    ExtractionMethod.REGULAR_EXPRESSION: (
        "Regular Expression", "Pattern matching with regex [A-Za-z0-9']+"),
    ExtractionMethod.BIT_BY_BIT_SCAN: (
        "Bit-by-Bit Scan", "Byte stream classification without flushing incomplete messages"),
    ExtractionMethod.HYBRID_MODE: (
        "Hybrid Mode", "Runs every other method in parallel"),
    ExtractionMethod.EXPERIMENTAL_PROTOCOL: (
        "Experimental Protocol", "Variable-size byte sets framed by a size indicator"),
}


# ── Results ──────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Output of one extractor invocation."""
    method: ExtractionMethod
    sequences: tuple[str, ...]
    duration_ms: float
    bits_processed: int
    count: int = 0
    avg_length: float = 0.0
    min_length: int = 0
    max_length: int = 0
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now)

    @classmethod
    def build(
        cls,
        method: ExtractionMethod,
        sequences: Iterable[str],
        duration_ms: float,
        bits_processed: int,
    ) -> ExtractionResult:
        """Create a result, deriving the length statistics from ``sequences``."""
        seqs = tuple(sequences)
        lengths = [len(s) for s in seqs]
        return cls(
            method=method,
            sequences=seqs,
            duration_ms=duration_ms,
            bits_processed=bits_processed,
            count=len(seqs),
            avg_length=sum(lengths) / len(lengths) if lengths else 0.0,
            min_length=min(lengths, default=0),
            max_length=max(lengths, default=0),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "method": self.method.value,
            "sequences": list(self.sequences),
            "count": self.count,
            "duration": self.duration_ms,
            "bitsProcessed": self.bits_processed,
            "avgLength": self.avg_length,
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class AggregatedExtractionResult:
    """Merged output of several extractors run over the same bytes."""
    results: tuple[ExtractionResult, ...]            # completion order
    unique_sequences: frozenset[str]
    total_duration_ms: float
    active_methods: tuple[ExtractionMethod, ...]
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now)

    @classmethod
    def from_results(cls, results: Iterable[ExtractionResult]) -> AggregatedExtractionResult:
        collected = tuple(results)
        return cls(
            results=collected,
            unique_sequences=frozenset(s for r in collected for s in r.sequences),
            total_duration_ms=sum(r.duration_ms for r in collected),
            active_methods=tuple(r.method for r in collected),
        )

    @property
    def total_count(self) -> int:
        return sum(r.count for r in self.results)

    @property
    def unique_count(self) -> int:
        return len(self.unique_sequences)

    @property
    def average_duration_ms(self) -> float:
        if not self.results:
            return 0.0
        return self.total_duration_ms / len(self.results)

    def sorted_results(self) -> list[ExtractionResult]:
        """Results in method declaration order (completion order is not stable)."""
        return sorted(self.results, key=lambda r: r.method.rank)

    def to_dict(self) -> dict:
        ordered = self.sorted_results()
        return {
            "id": self.id,
            "results": [r.to_dict() for r in ordered],
            "uniqueSequences": sorted(self.unique_sequences),
            "timestamp": self.timestamp,
            "totalDuration": self.total_duration_ms,
            "activeMethods": [r.method.value for r in ordered],
            "totalCount": self.total_count,
            "uniqueCount": self.unique_count,
            "averageDuration": self.average_duration_ms,
        }


@dataclass(frozen=True, slots=True)
class FilterResult:
    """Ban/repetition verdict for one piece of text."""
    is_banned: bool
    is_repetitive: bool
    repetition_score: float        # 0.0–1.0
    should_hide: bool
    reason: str | None             # "banned" | "repetitive:<score>" | None

    @classmethod
    def build(cls, is_banned: bool, is_repetitive: bool, repetition_score: float) -> FilterResult:
        if is_banned:
            reason: str | None = "banned"
        elif is_repetitive:
            reason = f"repetitive:{repetition_score:.2f}"
        else:
            reason = None
        return cls(
            is_banned=is_banned,
            is_repetitive=is_repetitive,
            repetition_score=repetition_score,
            should_hide=is_banned or is_repetitive,
            reason=reason,
        )

    def to_dict(self) -> dict:
        return {
            "isBanned": self.is_banned,
            "isRepetitive": self.is_repetitive,
            "repetitionScore": self.repetition_score,
            "shouldHide": self.should_hide,
            "reason": self.reason,
        }
