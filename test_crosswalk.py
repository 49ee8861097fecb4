"""
Tests for the diagnosis code crosswalk.

Run with: pytest test_crosswalk.py -v
"""

from pathlib import Path

import pytest
from hcc_classifier import CodeMapping, CrosswalkIndex, ParseError, normalize_code

DATA_DIR = Path(__file__).parent / "data"


class TestNormalizeCode:
    """Test diagnosis code normalization."""

    def test_period_removed(self):
        assert normalize_code("250.00") == "25000"

    def test_whitespace_and_case(self):
        assert normalize_code("  v45.11 ") == "V4511"

    def test_none(self):
        assert normalize_code(None) == ""


class TestCrosswalkIndex:
    """Test building and querying the crosswalk."""

    def test_lookup(self):
        """Test lookup of mapped codes."""
        index = CrosswalkIndex(["25000   19", "4280    85"])

        assert index.lookup("25000") == 19
        assert index.lookup("4280") == 85

    def test_lookup_normalizes(self):
        """Test that codes with periods find the same category."""
        index = CrosswalkIndex(["25000 19"])

        assert index.lookup("250.00") == 19
        assert index.lookup(" 250.00\n") == 19

    def test_artifact_codes_normalized(self):
        """Test that periods in the artifact itself are stripped."""
        index = CrosswalkIndex(["428.0 85"])

        assert index.lookup("4280") == 85

    def test_missing_code(self):
        """Test that an unmapped code returns None."""
        index = CrosswalkIndex(["25000 19"])

        assert index.lookup("4011") is None
        assert index.lookup("") is None
        assert index.lookup(None) is None

    def test_blank_lines_skipped(self):
        """Test that blank lines are ignored."""
        index = CrosswalkIndex(["", "25000 19", "   ", "4280 85", ""])

        assert len(index) == 2

    def test_round_trip(self):
        """Test that every pair in the artifact is found again."""
        lines = (DATA_DIR / "F2218O1P.TXT").read_text().splitlines()
        index = CrosswalkIndex.from_path(DATA_DIR / "F2218O1P.TXT")

        for line in lines:
            fields = line.split()
            if not fields:
                continue
            code, category = fields
            assert index.lookup(normalize_code(code)) == int(category)

    def test_mappings(self):
        """Test export of mappings."""
        index = CrosswalkIndex(["25000 19", "4280 85"])

        assert index.mappings() == [
            CodeMapping(diagnosis_code="25000", category_id=19),
            CodeMapping(diagnosis_code="4280", category_id=85),
        ]
        assert index.categories() == [19, 85]

    def test_contains(self):
        index = CrosswalkIndex(["25000 19"])

        assert "250.00" in index
        assert "4280" not in index
        assert 25000 not in index

    def test_byte_order_mark(self, tmp_path):
        """Test that a leading byte order mark does not hide the first code."""
        path = tmp_path / "xwalk_bom.txt"
        path.write_bytes(b"\xef\xbb\xbf25000 19\n4280 85\n")

        index = CrosswalkIndex.from_path(path)

        assert index.lookup("25000") == 19
        assert index.lookup("4280") == 85
        assert len(index) == 2


class TestCrosswalkDuplicates:
    """Test the duplicate code policy."""

    LINES = ["25000 19", "25000 18"]

    def test_reject_by_default(self):
        """Test that a conflicting duplicate is rejected."""
        with pytest.raises(ParseError, match="both category 19 and 18"):
            CrosswalkIndex(self.LINES)

    def test_first_match(self):
        index = CrosswalkIndex(self.LINES, duplicate_policy="first")

        assert index.lookup("25000") == 19

    def test_last_match(self):
        index = CrosswalkIndex(self.LINES, duplicate_policy="last")

        assert index.lookup("25000") == 18

    def test_exact_repeat_accepted(self):
        """Test that the same pair listed twice is not a conflict."""
        index = CrosswalkIndex(["25000 19", "250.00 19"])

        assert index.lookup("25000") == 19
        assert len(index) == 1

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="Unknown duplicate policy"):
            CrosswalkIndex(self.LINES, duplicate_policy="merge")


class TestCrosswalkErrors:
    """Test malformed crosswalk lines."""

    def test_wrong_column_count(self):
        """Test a line with three columns."""
        with pytest.raises(ParseError) as exc_info:
            CrosswalkIndex(["25000 19", "4280 85 extra"], artifact="xwalk.txt")

        assert exc_info.value.line_number == 2
        assert exc_info.value.artifact == "xwalk.txt"

    def test_single_column(self):
        with pytest.raises(ParseError, match="Expected 2 columns"):
            CrosswalkIndex(["25000"])

    def test_non_integer_category(self):
        with pytest.raises(ParseError, match="not an integer"):
            CrosswalkIndex(["25000 HCC19"])

    def test_empty_code(self):
        with pytest.raises(ParseError, match="empty"):
            CrosswalkIndex([". 19"])

    def test_file_closed_on_error(self, tmp_path):
        """Test that a parse error from a file is reported with its name."""
        path = tmp_path / "bad_xwalk.txt"
        path.write_text("25000 19\n4280\n")

        with pytest.raises(ParseError) as exc_info:
            CrosswalkIndex.from_path(path)

        assert exc_info.value.artifact == "bad_xwalk.txt"
