"""Tests for the extraction core — methods, aggregator, codec, catalog."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from frame_extractor import (
    AggregatedExtractionResult, DecodeError, ExtractionMethod, ExtractionResult,
    Extractor, InvalidCustomDelimiter,
    SearchConfig, UnknownDelimiter, decode, extract_all, extract_one, lookup_delimiter,
)
from frame_extractor import methods
from frame_extractor.codec import encode_hex
from frame_extractor.delimiters import STANDARD_DELIMITERS, custom_pair, describe_byte, parse_byte
from frame_extractor.extractor import resolve_methods
from frame_extractor.methods import bytes_to_text, segment_size

M = ExtractionMethod
FRAMED = (M.SIGNALING_STRICT, M.SIGNALING_FLEXIBLE, M.BIT_BY_BIT_SCAN)
SOH_ETX = SearchConfig.from_delimiter(lookup_delimiter("SOH/ETX"))


def hexbytes(text: str) -> bytes:
    return bytes.fromhex(text)


def sequences(method, data, config=SOH_ETX):
    return list(extract_one(method, data, config).sequences)


# ── Framed methods ───────────────────────────────────────────────────

def test_flexible_single_message():
    result = extract_one(M.SIGNALING_FLEXIBLE, hexbytes("01 48 45 4C 4C 4F 03"), SOH_ETX)
    assert list(result.sequences) == ["HELLO"]
    assert result.count == 1
    assert result.min_length == result.max_length == 5
    assert result.avg_length == 5.0
    assert result.bits_processed == 7 * 8
    assert result.method is M.SIGNALING_FLEXIBLE


def test_unterminated_message_per_method():
    data = hexbytes("01 48 45 4C 4C 4F")
    assert sequences(M.SIGNALING_FLEXIBLE, data) == ["HELLO"]
    assert sequences(M.SIGNALING_STRICT, data) == []
    assert sequences(M.BIT_BY_BIT_SCAN, data) == []


def test_trailing_unframed_text_is_ignored():
    data = hexbytes("01 48 45 4C 4C 4F 03 77 6F 72 6C 64")
    for method in FRAMED:
        assert sequences(method, data) == ["HELLO"], method


def test_start_byte_inside_message():
    data = hexbytes("01 41 01 42 03")
    assert sequences(M.SIGNALING_STRICT, data) == ["AB"]
    assert sequences(M.SIGNALING_FLEXIBLE, data) == ["A\x01B"]
    assert sequences(M.BIT_BY_BIT_SCAN, data) == ["A\x01B"]


def test_multiple_messages_in_order():
    data = hexbytes("01 43 03 00 01 41 03 01 42 03")
    for method in FRAMED:
        assert sequences(method, data) == ["C", "A", "B"]


def test_same_byte_opens_and_closes():
    config = SearchConfig.from_delimiter(lookup_delimiter("ESC/ESC"))
    data = hexbytes("1B 41 42 1B 43 1B 44 45 1B")
    for method in FRAMED:
        assert sequences(method, data, config) == ["AB", "DE"]


def test_default_config_accepts_soh_stx_and_etx_eot():
    data = hexbytes("02 41 03 01 42 04")
    assert sequences(M.SIGNALING_FLEXIBLE, data, SearchConfig()) == ["A", "B"]


def test_length_bounds_enforced_at_collection():
    config = SOH_ETX.with_bounds(2, 3)
    data = hexbytes("01 41 03 01 41 42 03 01 41 42 43 44 03")
    for method in FRAMED:
        assert sequences(method, data, config) == ["AB"]


def test_empty_message_needs_zero_min_length():
    data = hexbytes("01 03")
    assert sequences(M.SIGNALING_STRICT, data) == []
    assert sequences(M.SIGNALING_STRICT, data, SOH_ETX.with_bounds(0, 10)) == [""]


def test_flexible_does_not_flush_empty_trailing_message():
    config = SOH_ETX.with_bounds(0, 10)
    assert sequences(M.SIGNALING_FLEXIBLE, hexbytes("01"), config) == []


def test_ascii_only_filters_bytes():
    config = SearchConfig.from_delimiter(lookup_delimiter("SOH/ETX"), ascii_only=True)
    assert sequences(M.SIGNALING_FLEXIBLE, hexbytes("01 41 00 42 FF 09 03"), config) == ["AB\t"]


def test_utf8_then_latin1_decoding():
    assert sequences(M.SIGNALING_FLEXIBLE, hexbytes("01 C3 A9 03")) == ["é"]
    assert sequences(M.SIGNALING_FLEXIBLE, hexbytes("01 E9 03")) == ["é"]


def test_length_counts_characters_not_bytes():
    config = SOH_ETX.with_bounds(1, 1)
    assert sequences(M.SIGNALING_STRICT, hexbytes("01 C3 A9 03"), config) == ["é"]


def test_bytes_to_text():
    assert bytes_to_text(b"a\x00b\x7fc\r\n", ascii_only=True) == "abc\r\n"
    assert bytes_to_text(b"\xff\xfe", ascii_only=False) == "ÿþ"
    assert bytes_to_text("ok".encode(), ascii_only=False) == "ok"


def test_bytearray_input_is_accepted():
    data = bytearray(hexbytes("01 48 49 03"))
    assert sequences(M.SIGNALING_STRICT, data) == ["HI"]


# ── Regular expression ───────────────────────────────────────────────

def test_regex_dedupes_and_sorts():
    data = b"\x01hello \x03world hello it's \x00ok"
    assert sequences(M.REGULAR_EXPRESSION, data) == ["hello", "it's", "ok", "world"]


def test_regex_sorts_by_code_point():
    assert sequences(M.REGULAR_EXPRESSION, b"apple Zed") == ["Zed", "apple"]


def test_regex_ignores_delimiters_and_applies_bounds():
    config = SOH_ETX.with_bounds(3, 5)
    data = b"ok fine \x02toolongword\x03 yes"
    assert sequences(M.REGULAR_EXPRESSION, data, config) == ["fine", "yes"]


def test_regex_control_bytes_join_runs():
    # Control bytes are dropped before matching, so neighbours merge
    assert sequences(M.REGULAR_EXPRESSION, b"AB\x01CD") == ["ABCD"]


# ── Experimental protocol ────────────────────────────────────────────

def test_segment_size_classes():
    assert segment_size(0) == 4
    assert segment_size(7) == 6
    assert segment_size(8) == 11
    assert segment_size(15) == 8
    assert segment_size(16) == 13
    assert segment_size(255) == 12


def test_experimental_reads_one_segment():
    # id=07, indicator=00 → size 4; message-id byte dropped
    data = bytes([0x07, 0x00, 0x41, 0x42])
    assert sequences(M.EXPERIMENTAL_PROTOCOL, data) == ["\x00AB"]


def test_experimental_overrun_retries_next_offset():
    # indicator 03 → size 7 > 4 bytes available
    assert sequences(M.EXPERIMENTAL_PROTOCOL, bytes([0x07, 0x03, 0x41, 0x42])) == []


def test_experimental_consecutive_segments():
    data = bytes([0x01, 0x00, 0x41, 0x42, 0x02, 0x01, 0x43, 0x44, 0x45])
    assert sequences(M.EXPERIMENTAL_PROTOCOL, data) == ["\x00AB", "\x01CDE"]


def test_experimental_short_buffer():
    assert sequences(M.EXPERIMENTAL_PROTOCOL, b"\x01\x02\x03") == []
    assert sequences(M.EXPERIMENTAL_PROTOCOL, b"") == []


def test_experimental_latin1_fallback():
    data = bytes([0x01, 0x00, 0xFF, 0xFE])
    assert sequences(M.EXPERIMENTAL_PROTOCOL, data) == ["\x00ÿþ"]


# ── Properties across methods ────────────────────────────────────────

NOISE = bytes(range(256)) * 3 + b"\x01HELLO\x03\x02WORLD WIDE\x04"


def test_every_sequence_within_bounds():
    config = SearchConfig(min_length=2, max_length=5)
    for method in ExtractionMethod.concrete():
        for seq in extract_one(method, NOISE, config).sequences:
            assert 2 <= len(seq) <= 5, (method, seq)


def test_methods_are_deterministic():
    for method in ExtractionMethod.concrete():
        first = extract_one(method, NOISE, SearchConfig())
        second = extract_one(method, NOISE, SearchConfig())
        assert first.sequences == second.sequences


def test_empty_input_yields_empty_results():
    for method in ExtractionMethod.concrete():
        result = extract_one(method, b"", SOH_ETX)
        assert result.count == 0
        assert result.avg_length == 0.0
        assert result.min_length == result.max_length == 0


def test_every_concrete_method_registered():
    assert set(methods.EXTRACTORS) == set(ExtractionMethod.concrete())


# ── Aggregator ───────────────────────────────────────────────────────

def test_hybrid_runs_all_five():
    result = extract_all(hexbytes("01 48 45 4C 4C 4F 03"), SOH_ETX, {M.HYBRID_MODE})
    assert len(result.results) == 5
    assert set(result.active_methods) == set(ExtractionMethod.concrete())
    assert M.HYBRID_MODE not in result.active_methods
    assert result.unique_sequences == {"HELLO"}


def test_unique_sequences_is_union():
    result = Extractor(max_workers=2).run(NOISE, SearchConfig(), ["hybridMode"])
    union = set()
    for r in result.results:
        union |= set(r.sequences)
    assert result.unique_sequences == union
    assert result.total_count == sum(r.count for r in result.results)
    assert result.total_duration_ms == pytest.approx(sum(r.duration_ms for r in result.results))


def test_sorted_results_follow_declaration_order():
    result = extract_all(NOISE, SearchConfig(), [M.HYBRID_MODE])
    assert [r.method for r in result.sorted_results()] == list(ExtractionMethod.concrete())


def test_default_method_is_flexible():
    result = extract_all(hexbytes("01 48 49"), SOH_ETX)
    assert result.active_methods == (M.SIGNALING_FLEXIBLE,)
    assert result.unique_sequences == {"HI"}


def test_empty_selection():
    result = extract_all(NOISE, SOH_ETX, [])
    assert result.results == ()
    assert result.unique_count == 0
    assert result.average_duration_ms == 0.0


def test_resolve_methods():
    assert resolve_methods(None) == [M.SIGNALING_FLEXIBLE]
    assert resolve_methods(["bitByBitScan", M.SIGNALING_STRICT, "signalingStrict"]) == [
        M.SIGNALING_STRICT, M.BIT_BY_BIT_SCAN,
    ]
    assert resolve_methods([M.HYBRID_MODE, M.REGULAR_EXPRESSION]) == list(ExtractionMethod.concrete())
    with pytest.raises(ValueError):
        resolve_methods(["nope"])


def test_extract_one_rejects_hybrid():
    with pytest.raises(ValueError):
        extract_one(M.HYBRID_MODE, b"", SOH_ETX)


def test_failing_method_is_dropped(monkeypatch):
    def boom(data, config):
        raise RuntimeError("boom")

    monkeypatch.setitem(methods.EXTRACTORS, M.REGULAR_EXPRESSION, boom)
    result = extract_all(hexbytes("01 48 49 03"), SOH_ETX, [M.HYBRID_MODE])
    assert len(result.results) == 4
    assert M.REGULAR_EXPRESSION not in result.active_methods
    assert result.unique_sequences == {"HI"}


def test_aggregated_to_dict():
    result = extract_all(hexbytes("01 48 49 03 01 41 03"), SOH_ETX, [M.SIGNALING_STRICT])
    out = result.to_dict()
    assert out["uniqueSequences"] == ["A", "HI"]
    assert out["activeMethods"] == ["signalingStrict"]
    assert out["results"][0]["sequences"] == ["HI", "A"]
    assert out["uniqueCount"] == 2


def test_to_dict_lists_methods_in_result_order():
    # handed over in completion order, last-declared method first
    late = ExtractionResult.build(M.EXPERIMENTAL_PROTOCOL, [], 0.1, 0)
    early = ExtractionResult.build(M.SIGNALING_STRICT, ["A"], 0.1, 8)
    out = AggregatedExtractionResult.from_results([late, early]).to_dict()
    assert out["activeMethods"] == ["signalingStrict", "experimentalProtocol"]
    assert [r["method"] for r in out["results"]] == out["activeMethods"]


# ── Codec ────────────────────────────────────────────────────────────

def test_decode_hex():
    assert decode("01 48 45", "hex") == b"\x01HE"
    assert decode("0a0B", "HEX") == b"\x0a\x0b"


def test_decode_hex_ignores_any_whitespace():
    assert decode("01\t48\n45\r\n", "hex") == b"\x01HE"
    assert decode("01\t\t48", "hex") == b"\x01H"
    with pytest.raises(DecodeError):
        decode("01\t4", "hex")


def test_decode_hex_errors():
    with pytest.raises(DecodeError):
        decode("014", "hex")
    with pytest.raises(DecodeError):
        decode("zz", "hex")
    with pytest.raises(ValueError):     # DecodeError is a ValueError
        decode("0x01", "hex")


def test_decode_base64():
    assert decode("AUhFTExPAw==", "base64") == hexbytes("01 48 45 4C 4C 4F 03")


def test_decode_base64_errors():
    with pytest.raises(DecodeError):
        decode("abc", "base64")
    with pytest.raises(DecodeError):
        decode("!!!!", "base64")


def test_decode_unknown_encoding():
    with pytest.raises(DecodeError):
        decode("00", "utf-16")


def test_encode_hex():
    assert encode_hex(b"\x01H") == "01 48"


# ── Delimiter catalog ────────────────────────────────────────────────

def test_catalog_has_eight_presets():
    assert len(STANDARD_DELIMITERS) == 8
    assert [d.id for d in STANDARD_DELIMITERS] == [str(i) for i in range(8)]


def test_lookup_delimiter():
    pair = lookup_delimiter("STX/ETB")
    assert (pair.start_byte, pair.end_byte) == (0x02, 0x17)


def test_lookup_unknown_delimiter():
    with pytest.raises(UnknownDelimiter):
        lookup_delimiter("XXX/YYY")
    with pytest.raises(LookupError):
        lookup_delimiter("soh/etx")


def test_parse_byte():
    assert parse_byte("0x1B") == 0x1B
    assert parse_byte("1b") == 0x1B
    assert parse_byte(255) == 255
    for bad in ("0x100", "zz", "", -1, True):
        with pytest.raises(InvalidCustomDelimiter):
            parse_byte(bad)


def test_custom_pair():
    assert custom_pair(1, 3).name == "SOH/ETX"
    pair = custom_pair("0x05", "0x06")
    assert pair.name == "0x05/0x06"
    assert pair.id == "custom"


def test_search_config_from_custom():
    config = SearchConfig.from_custom("0x1C", "0x1D", min_length=2)
    assert config.start_bytes == {0x1C}
    assert config.end_bytes == {0x1D}
    assert config.delimiter.name == "FS/GS"
    assert config.min_length == 2


def test_search_config_validation():
    with pytest.raises(ValueError):
        SearchConfig(min_length=5, max_length=2)
    with pytest.raises(ValueError):
        SearchConfig(min_length=-1)
    with pytest.raises(ValueError):
        SearchConfig(start_bytes={300})


def test_search_config_freezes_byte_sets():
    config = SearchConfig(start_bytes=[1, 2], end_bytes={3})
    assert isinstance(config.start_bytes, frozenset)
    assert config.start_bytes == {1, 2}


def test_describe_byte():
    assert describe_byte(0x01) == "0x01 (SOH)"
    assert describe_byte(0x7F) == "0x7F (DEL)"
    assert describe_byte(0x41) == "0x41"


def test_method_metadata():
    assert M.BIT_BY_BIT_SCAN.display_name == "Bit-by-Bit Scan"
    assert M("hybridMode") is M.HYBRID_MODE
    assert len(ExtractionMethod.concrete()) == 5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
