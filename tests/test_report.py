"""
Tests for the diagnostics catalog and the reporter.
"""
import io

import pytest

from turing_lang.internals import errors as er
from turing_lang.internals.diagnostics import (
    CompilerSyntaxError,
    CompilerWarning,
    FileRuleError,
    StateOverwrite,
)
from turing_lang.internals.parse_errors import handle_parse_exception
from turing_lang.internals.report import Reporter, Span, underline


# ═══════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════

class TestCatalog:
    def test_lookup(self):
        assert er.ERR.CE2001 is er.ERR["CE2001"]
        assert er.ERR.CE2001.severity is er.Severity.ERROR
        assert er.ERR.CW1001.severity is er.Severity.WARNING
        assert er.ERR.CE2003.category is er.Category.LIBRARY

    def test_unknown_code(self):
        with pytest.raises(AttributeError):
            er.ERR.CE9999

    def test_format_message(self):
        text = er.format_message("CE2003", name="product")
        assert text == 'Could not find the library "product"'

    def test_missing_placeholder(self):
        with pytest.raises(KeyError) as info:
            er.format_message("CE2003")
        assert info.value.args[0].startswith("missing text key 'name' for CE2003")

    def test_duplicate_codes_rejected(self):
        with pytest.raises(ValueError, match="duplicate error code"):
            er._add(er.ErrorMessage("CE2001", er.Severity.ERROR, "again"))

    def test_internal_error(self):
        with pytest.raises(RuntimeError, match="CE0002: instruction expects 5 fields, got 3"):
            er.raise_internal_error("CE0002", got=3)

    def test_emit_uses_severity(self):
        r = Reporter()
        er.emit(r, er.ERR.RW0001, None, state="q0", threshold=10)
        er.emit(r, er.ERR.RE0001, None, state="q1", value=0)
        assert [d.kind for d in r.items] == ["warning", "error"]
        assert r.items[1].message == "no instruction given for state (q1, 0)"


# ═══════════════════════════════════════════
# Spans and underlines
# ═══════════════════════════════════════════

class TestSpan:
    def test_str(self):
        assert str(Span(2, 5)) == "2:5"
        assert str(Span(2, 5, 2, 9)) == "2:5 to 2:9"

    def test_underline(self):
        assert underline("abcdef", 3, 5) == "~~^^~~"

    def test_underline_single_column(self):
        assert underline("abc", 2, None) == "~^~"

    def test_underline_past_the_end(self):
        assert underline("ab", 3, None) == "~~^"


# ═══════════════════════════════════════════
# Reporter
# ═══════════════════════════════════════════

class TestReporter:
    def test_plain_format(self):
        r = Reporter(source="{000};\n", filename="t.tm")
        r.error("CE2001", "Expected at least a 1 in the tape", Span(1, 1, 1, 7))
        assert r.format(use_color=False, use_unicode=False) == (
            "t.tm:1:1: error [CE2001]: Expected at least a 1 in the tape.\n"
            "  | {000};\n"
            "  ` ^^^^^^"
        )

    def test_unicode_guides(self):
        r = Reporter(source="(q0, 1, 0, X, q1);", filename="t.tm")
        r.error("CE2002", '"X" is an unknown movement', Span(1, 12, 1, 13))
        lines = r.format(use_color=False, use_unicode=True).splitlines()
        assert lines[1] == "  │ (q0, 1, 0, X, q1);"
        assert lines[2] == "  ╰ " + "~" * 11 + "^" + "~" * 6

    def test_color(self):
        r = Reporter(source="{1};", filename="t.tm")
        r.warn("CW1001", "instruction (q0, 1) already exists, overwriting it", Span(1, 1))
        text = r.format(use_color=True, use_unicode=False)
        assert "\x1b[33m" in text
        assert "warning" in text

    def test_snippet_without_source(self):
        r = Reporter(filename="t.tm")
        r.error("CE1001", "bad", Span(7, 3), snippet="oops")
        lines = r.format(use_color=False, use_unicode=False).splitlines()
        assert lines == ["t.tm:7:3: error [CE1001]: bad.", "  | oops", "  ` ^^^^"]

    def test_no_span(self):
        r = Reporter(filename="t.tm")
        r.error("RE0001", "no instruction given for state (q1, 0)", None)
        assert r.format(use_color=False) == "t.tm: error [RE0001]: no instruction given for state (q1, 0)."

    def test_has_warnings(self):
        r = Reporter()
        r.error("CE2001", "e", None)
        assert not r.has_warnings
        r.warn("CW1001", "w", None)
        assert r.has_warnings

    def test_print_is_plain_when_not_a_tty(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        r = Reporter(source="{1};", filename="t.tm")
        r.error("CE2001", "e", Span(1, 1))
        stream = io.StringIO()
        r.print(stream)
        assert "\x1b[" not in stream.getvalue()
        assert "  | {1};" in stream.getvalue()

    def test_print_nothing(self):
        stream = io.StringIO()
        Reporter().print(stream)
        assert stream.getvalue() == ""


# ═══════════════════════════════════════════
# Build errors and warnings
# ═══════════════════════════════════════════

class TestCompilerDiagnostics:
    def test_error_str(self):
        err = CompilerSyntaxError("CE2003", Span(2, 17), code="product", name="product")
        assert str(err) == 'CE2003 at 2:17: Could not find the library "product"'

    def test_file_rule_error(self):
        err = FileRuleError("unexpected 'I', expected ';'", Span(2, 1), "I = {q0};")
        assert err.error_code == "CE1001"
        assert err.message == "unexpected 'I', expected ';'"

    def test_warning_emit(self):
        r = Reporter()
        StateOverwrite(Span(4, 1), "q0", False).emit(r)
        (d,) = r.items
        assert (d.kind, d.code) == ("warning", "CW1001")
        assert d.message == "instruction (q0, 0) already exists, overwriting it"

    def test_warning_base_is_abstract(self):
        with pytest.raises(TypeError):
            CompilerWarning(Span(1, 1))

    def test_handle_parse_exception(self):
        r = Reporter()
        err = CompilerSyntaxError("CE2001", Span(1, 1), code="{0}")
        assert handle_parse_exception(err, r) is True
        assert r.items[0].snippet == "{0}"
        assert handle_parse_exception(ValueError("x"), r) is False
        assert len(r.items) == 1
