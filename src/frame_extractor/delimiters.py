"""Delimiter presets and the ASCII control-character table.

Both tables are built once at import time and never written afterwards,
so they are safe to share between threads.
"""

from __future__ import annotations
from .types import ControlCharacter, DelimiterPair, InvalidCustomDelimiter, UnknownDelimiter

# Each preset: (name, start, end, description)
_PRESETS: list[tuple[str, int, int, str]] = [
    ("SOH/ETX", 0x01, 0x03, "Start of Heading / End of Text"),
    ("STX/ETX", 0x02, 0x03, "Start of Text / End of Text"),
    ("STX/ETB", 0x02, 0x17, "Start of Text / End of Transmission Block"),
    ("SOH/EOT", 0x01, 0x04, "Start of Heading / End of Transmission"),
    ("FS/GS", 0x1C, 0x1D, "File Separator / Group Separator"),
    ("RS/US", 0x1E, 0x1F, "Record Separator / Unit Separator"),
    # Same byte opens and closes
    ("ESC/ESC", 0x1B, 0x1B, "Escape (same as end)"),
    ("DLE/DLE", 0x10, 0x10, "Data Link Escape (same as end)"),
]

STANDARD_DELIMITERS: tuple[DelimiterPair, ...] = tuple(
    DelimiterPair(id=str(i), name=name, start_byte=start, end_byte=end, description=desc)
    for i, (name, start, end, desc) in enumerate(_PRESETS)
)

_BY_NAME: dict[str, DelimiterPair] = {d.name: d for d in STANDARD_DELIMITERS}


def lookup_delimiter(name: str) -> DelimiterPair:
    """Return the preset called ``name`` (exact match, e.g. ``"SOH/ETX"``)."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownDelimiter(f"unknown delimiter {name!r}") from None


def parse_byte(value: str | int) -> int:
    """Parse a custom delimiter value: ``"0x1B"``, ``"1b"`` or an int."""
    if isinstance(value, bool):
        raise InvalidCustomDelimiter(f"not a byte value: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        text = value.strip().lower()
        if text.startswith("0x"):
            text = text[2:]
        try:
            number = int(text, 16)
        except ValueError:
            raise InvalidCustomDelimiter(f"not a hex byte: {value!r}") from None
    if not 0 <= number <= 0xFF:
        raise InvalidCustomDelimiter(f"byte out of range: {value!r}")
    return number


def custom_pair(start: str | int, end: str | int) -> DelimiterPair:
    """Build an ad-hoc pair, reusing the preset name when one matches."""
    s, e = parse_byte(start), parse_byte(end)
    for preset in STANDARD_DELIMITERS:
        if (preset.start_byte, preset.end_byte) == (s, e):
            return preset
    return DelimiterPair(
        id="custom",
        name=f"0x{s:02X}/0x{e:02X}",
        start_byte=s,
        end_byte=e,
        description="Custom delimiter pair",
    )


# ── Control characters ───────────────────────────────────────────────

_CONTROLS: list[tuple[int, str, str, str]] = [
    (0x00, "NUL", "Null", "No operation"),
    (0x01, "SOH", "Start of Heading", "Message header"),
    (0x02, "STX", "Start of Text", "Text start"),
    (0x03, "ETX", "End of Text", "Text end"),
    (0x04, "EOT", "End of Transmission", "Transmission end"),
    (0x05, "ENQ", "Enquiry", "Request status"),
    (0x06, "ACK", "Acknowledge", "Positive response"),
    (0x07, "BEL", "Bell", "Ring bell/alert"),
    (0x08, "BS", "Backspace", "Move back one position"),
    (0x09, "HT", "Horizontal Tab", "Tab right"),
    (0x0A, "LF", "Line Feed", "Move to next line"),
    (0x0B, "VT", "Vertical Tab", "Tab down"),
    (0x0C, "FF", "Form Feed", "New page"),
    (0x0D, "CR", "Carriage Return", "Move to line start"),
    (0x0E, "SO", "Shift Out", "Activate alt charset"),
    (0x0F, "SI", "Shift In", "Activate std charset"),
    (0x10, "DLE", "Data Link Escape", "Link escape"),
    (0x11, "DC1", "Device Control 1", "XON - Resume transmission"),
    (0x12, "DC2", "Device Control 2", "Device control 2"),
    (0x13, "DC3", "Device Control 3", "XOFF - Stop transmission"),
    (0x14, "DC4", "Device Control 4", "Device control 4"),
    (0x15, "NAK", "Negative Acknowledge", "Negative response"),
    (0x16, "SYN", "Synchronous Idle", "Sync character"),
    (0x17, "ETB", "End of Transmission Block", "Block end"),
    (0x18, "CAN", "Cancel", "Cancel transmission"),
    (0x19, "EM", "End of Medium", "Medium end"),
    (0x1A, "SUB", "Substitute", "Replace bad char"),
    (0x1B, "ESC", "Escape", "Start escape sequence"),
    (0x1C, "FS", "File Separator", "CSV-like separator"),
    (0x1D, "GS", "Group Separator", "Group separator"),
    (0x1E, "RS", "Record Separator", "Record separator"),
    (0x1F, "US", "Unit Separator", "Unit separator"),
    (0x7F, "DEL", "Delete", "Delete character"),
]

CONTROL_CHARACTERS: tuple[ControlCharacter, ...] = tuple(
    ControlCharacter(code=c, abbreviation=a, full_name=f, description=d)
    for c, a, f, d in _CONTROLS
)

_BY_CODE: dict[int, ControlCharacter] = {c.code: c for c in CONTROL_CHARACTERS}


def describe_byte(value: int) -> str:
    """``0x01`` → ``"0x01 (SOH)"``; non-control bytes get the hex form only."""
    control = _BY_CODE.get(value)
    return control.display if control else f"0x{value:02X}"
