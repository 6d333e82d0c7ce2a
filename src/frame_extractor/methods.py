"""The five extraction methods.

Each public ``extract_*`` function maps ``(bytes, SearchConfig)`` to an
ExtractionResult and never raises: malformed input degrades to an empty or
partial result.  They share no state, so the aggregator can run them
side by side on the same buffer.

Framing at a glance (S = start byte, E = end byte):

    method              S while collecting    trailing message w/o E
    signalingStrict     skipped               discarded
    signalingFlexible   kept as data          kept
    bitByBitScan        kept as data          discarded

regularExpression ignores delimiters entirely; experimentalProtocol frames
by a size-indicator byte instead of end markers.
"""

from __future__ import annotations
import functools
import re
import time
from typing import Callable

from .types import ExtractionMethod, ExtractionResult, SearchConfig

Scan = Callable[[bytes, SearchConfig], list[str]]
Extract = Callable[[bytes, SearchConfig], ExtractionResult]

# method → extractor, filled in by @_extractor below
EXTRACTORS: dict[ExtractionMethod, Extract] = {}

# Everything outside printable ASCII plus TAB/LF/CR
_NON_PRINTABLE = bytes(b for b in range(256) if not (32 <= b <= 126 or b in (9, 10, 13)))

_WORD = re.compile(r"[A-Za-z0-9']+")


def bytes_to_text(data: bytes, *, ascii_only: bool) -> str:
    """Decode message bytes.

    ascii_only: drop everything but printable ASCII/TAB/LF/CR, then decode.
    Otherwise UTF-8, falling back to Latin-1 (which maps every byte).
    """
    if ascii_only:
        return data.translate(None, _NON_PRINTABLE).decode("ascii")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _extractor(method: ExtractionMethod) -> Callable[[Scan], Extract]:
    """Wrap a scan function with timing and result building, and register it."""
    def decorate(scan: Scan) -> Extract:
        def extract(data: bytes, config: SearchConfig) -> ExtractionResult:
            started = time.perf_counter()
            buf = bytes(data)   # private copy; callers may hand in a bytearray
            sequences = scan(buf, config)
            return ExtractionResult.build(
                method=method,
                sequences=sequences,
                duration_ms=(time.perf_counter() - started) * 1000,
                bits_processed=len(buf) * 8,
            )
        # keep name and doc, but not the list[str] return annotation
        functools.update_wrapper(
            extract, scan, assigned=("__module__", "__name__", "__qualname__", "__doc__"))
        EXTRACTORS[method] = extract
        return extract
    return decorate


def _close(message: bytearray, config: SearchConfig, out: list[str]) -> None:
    text = bytes_to_text(bytes(message), ascii_only=config.ascii_only)
    if config.accepts(text):
        out.append(text)


def _frame(
    data: bytes,
    config: SearchConfig,
    *,
    keep_inner_starts: bool,
    flush_incomplete: bool,
) -> list[str]:
    """Idle/collecting state machine shared by the three framed methods."""
    out: list[str] = []
    starts, ends = config.start_bytes, config.end_bytes
    collecting = False
    message = bytearray()

    for byte in data:
        if not collecting:
            if byte in starts:
                collecting = True
                message = bytearray()   # start byte itself is not retained
        elif byte in ends:
            _close(message, config, out)
            collecting = False
        elif byte in starts and not keep_inner_starts:
            continue
        else:
            message.append(byte)

    if flush_incomplete and collecting and message:
        _close(message, config, out)
    return out


# ── Method 1: Signaling Strict ───────────────────────────────────────

@_extractor(ExtractionMethod.SIGNALING_STRICT)
def extract_signaling_strict(data: bytes, config: SearchConfig) -> list[str]:
    """Both delimiters required; a start byte is only recognised from idle."""
    return _frame(data, config, keep_inner_starts=False, flush_incomplete=False)


# ── Method 2: Signaling Flexible ─────────────────────────────────────

@_extractor(ExtractionMethod.SIGNALING_FLEXIBLE)
def extract_signaling_flexible(data: bytes, config: SearchConfig) -> list[str]:
    """Permissive framing: an unterminated trailing message is kept."""
    return _frame(data, config, keep_inner_starts=True, flush_incomplete=True)


# ── Method 3: Regular Expression ─────────────────────────────────────

@_extractor(ExtractionMethod.REGULAR_EXPRESSION)
def extract_regular_expression(data: bytes, config: SearchConfig) -> list[str]:
    """Maximal ``[A-Za-z0-9']`` runs of the whole buffer, deduplicated and sorted.

    Delimiters and ``ascii_only`` are ignored; the buffer is always read as
    filtered ASCII.
    """
    text = bytes_to_text(data, ascii_only=True)
    return sorted({w for w in _WORD.findall(text) if config.accepts(w)})


# ── Method 4: Bit-by-Bit Scan ────────────────────────────────────────

@_extractor(ExtractionMethod.BIT_BY_BIT_SCAN)
def extract_bit_by_bit(data: bytes, config: SearchConfig) -> list[str]:
    # Classifies each byte as start/end/data like signalingFlexible, but an
    # unterminated trailing message is dropped.
    return _frame(data, config, keep_inner_starts=True, flush_incomplete=False)


# ── Method 5: Experimental Protocol ──────────────────────────────────

def segment_size(indicator: int) -> int:
    """Byte-set size from its size-indicator byte: 4–8, 8–12 or 12–16."""
    if indicator < 8:
        return 4 + indicator % 5
    if indicator < 16:
        return 8 + indicator % 5
    return 12 + indicator % 5


@_extractor(ExtractionMethod.EXPERIMENTAL_PROTOCOL)
def extract_experimental_protocol(data: bytes, config: SearchConfig) -> list[str]:
    """Byte sets framed by declared size.

    Layout of one set: ``[message-id][size-indicator][payload...]``.  The
    message-id byte is dropped; the indicator is part of the decoded
    content.  A set that would overrun the buffer is retried one byte later.
    """
    out: list[str] = []
    n = len(data)
    i = 0
    while i < n - 3:
        size = segment_size(data[i + 1])
        if i + size > n:
            i += 1
            continue
        text = bytes_to_text(data[i + 1:i + size], ascii_only=False)
        if config.accepts(text):
            out.append(text)
        i += size
    return out
