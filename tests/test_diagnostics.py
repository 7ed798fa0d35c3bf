"""Tests for the diagnostic trace and DecodeError."""

import pytest

from propbin import BinReader, DecodeError, Diagnostic, DiagnosticCollector, read_binary


class TestCollector:
    def test_fail_returns_false(self):
        collector = DiagnosticCollector()
        assert collector.fail("read(u32)", 8) is False
        assert len(collector) == 1
        assert collector

    def test_render_is_outermost_first(self):
        collector = DiagnosticCollector()
        collector.fail("read(STRING)", 40)
        collector.fail("read_value_of(STRING) for field 0x00000001", 40)
        collector.fail("read_sections()", 0)
        assert collector.render() == (
            "read_sections() @ 0\n"
            "read_value_of(STRING) for field 0x00000001 @ 40\n"
            "read(STRING) @ 40\n"
        )

    def test_clear(self):
        collector = DiagnosticCollector()
        collector.fail("x", 1)
        collector.clear()
        assert not collector
        assert collector.render() == ""


class TestDecodeError:
    def test_is_value_error(self):
        with pytest.raises(ValueError):
            read_binary(b'NOPE')

    def test_message_matches_render(self):
        data = b'PROP\x03\x00\x00\x00'
        reader = BinReader(data)
        assert not reader.process()
        with pytest.raises(DecodeError) as excinfo:
            read_binary(data)
        assert str(excinfo.value) + "\n" == reader.diagnostics.render()

    def test_innermost(self):
        err = DecodeError([Diagnostic("outer", 0), Diagnostic("inner", 9)])
        assert err.innermost == Diagnostic("inner", 9)
        assert str(err) == "outer @ 0\ninner @ 9"

    def test_offsets_never_exceed_buffer(self, skin_bytes):
        for cut in range(0, len(skin_bytes), 5):
            with pytest.raises(DecodeError) as excinfo:
                read_binary(skin_bytes[:cut])
            assert all(0 <= d.offset <= cut for d in excinfo.value.diagnostics)
