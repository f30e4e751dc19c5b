"""
Tests for the quote-aware CSV tokenizer.

Covers:
  - Quoted fields with embedded commas, line breaks and escaped quotes
  - Row endings (LF, CRLF) and the final unterminated line
  - Trimming and blank-line handling
"""

from forecaster.csv_parser import parse_csv

# ── Quoting ────────────────────────────────────────────────────────────


class TestQuotedFields:
    def test_embedded_comma_newline_and_escaped_quote_stay_in_one_cell(self):
        text = 'a,"x, ""y""\nz",b\n'
        assert parse_csv(text) == [["a", 'x, "y"\nz', "b"]]

    def test_quoted_crlf_is_literal(self):
        assert parse_csv('"line1\r\nline2",2') == [["line1\r\nline2", "2"]]

    def test_empty_quoted_field(self):
        assert parse_csv('"",b') == [["", "b"]]

    def test_quote_toggles_mid_field(self):
        """Quotes are structural wherever they appear, not only at field start."""
        assert parse_csv('ab"c,d"e,f') == [["abc,de", "f"]]


# ── Rows ───────────────────────────────────────────────────────────────


class TestRows:
    def test_lf_and_crlf_both_end_rows(self):
        assert parse_csv("a,b\r\nc,d\ne,f\n") == [["a", "b"], ["c", "d"], ["e", "f"]]

    def test_final_line_without_newline_is_kept(self):
        assert parse_csv("a,b\nc,d") == [["a", "b"], ["c", "d"]]

    def test_cells_are_trimmed(self):
        assert parse_csv("  a , b  \n") == [["a", "b"]]

    def test_trailing_comma_gives_empty_last_cell(self):
        assert parse_csv("a,\n") == [["a", ""]]

    def test_blank_lines_are_dropped(self):
        assert parse_csv("a\n\n\nb\n\n") == [["a"], ["b"]]

    def test_rows_of_empty_cells_are_kept(self):
        assert parse_csv("a,b\n,\n , \nc,d") == [["a", "b"], ["", ""], ["", ""], ["c", "d"]]

    def test_empty_text(self):
        assert parse_csv("") == []

    def test_ragged_rows_are_preserved(self):
        assert parse_csv("a,b,c\n1,2\n") == [["a", "b", "c"], ["1", "2"]]
