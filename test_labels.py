"""
Tests for the category label catalog parser.

Run with: pytest test_labels.py -v
"""

from pathlib import Path

import pytest
from hcc_classifier import CategoryLabel, ParseError, load_labels, parse_labels

DATA_DIR = Path(__file__).parent / "data"


class TestParseLabels:
    """Test parsing of label definition text."""

    def test_joined_entries(self):
        """Test two entries on one line."""
        catalog = parse_labels('1="Diag A" 2="Diag B"')

        assert catalog == [
            CategoryLabel(id=1, name="Diag A"),
            CategoryLabel(id=2, name="Diag B"),
        ]

    def test_wrapped_entry_is_rejoined(self):
        """Test that an entry wrapped across lines is joined back together."""
        text = (
            ' HCC2  ="Septicemia, Sepsis, Systemic Inflammatory Response\n'
            '         Syndrome/Shock"\n'
            ' HCC8  ="Metastatic Cancer and Acute Leukemia"\n'
        )
        catalog = parse_labels(text)

        assert [label.id for label in catalog] == [2, 8]
        assert catalog[0].name == "Septicemia, Sepsis, Systemic Inflammatory Response Syndrome/Shock"

    def test_sas_label_statement(self):
        """Test that the LABEL keyword and closing semicolon are ignored."""
        text = ' LABEL\n  HCC19 ="Diabetes without Complication"\n ;\n'
        catalog = parse_labels(text)

        assert catalog == [CategoryLabel(id=19, name="Diabetes without Complication")]

    def test_whitespace_and_quotes_trimmed(self):
        """Test that whitespace and surrounding quotes are trimmed from names."""
        catalog = parse_labels("7 = ' Padded Name '")

        assert catalog[0].id == 7
        assert catalog[0].name == "Padded Name"

    def test_apostrophe_inside_name(self):
        """Test a name containing an apostrophe."""
        catalog = parse_labels('78="Parkinson\'s and Huntington\'s Diseases"')

        assert catalog[0].name == "Parkinson's and Huntington's Diseases"

    def test_equals_sign_inside_name(self):
        """Test that only the first = separates id and name."""
        catalog = parse_labels('1="A = B" 2 = "C=D"')

        assert catalog[0].name == "A = B"
        assert catalog[1].name == "C=D"

    def test_backslash_inside_name(self):
        """Test that backslashes in a name are kept as written."""
        catalog = parse_labels('1="A\\\\B" 2="Angina\\Other"')

        assert catalog[0].name == "A\\\\B"
        assert catalog[1].name == "Angina\\Other"

    def test_unquoted_name(self):
        catalog = parse_labels("1=Septicemia 2='Angina'")

        assert [label.name for label in catalog] == ["Septicemia", "Angina"]

    def test_order_preserved(self):
        """Test that catalog order follows file order, not id order."""
        catalog = parse_labels('85="CHF" 19="Diabetes" 8="Cancer"')

        assert [label.id for label in catalog] == [85, 19, 8]


class TestLabelErrors:
    """Test malformed label text."""

    def test_token_without_equals(self):
        """Test an entry that is not id=name."""
        with pytest.raises(ParseError, match="id=name"):
            parse_labels('1="Diag A" orphan')

    def test_non_integer_id(self):
        """Test an id that is not an integer."""
        with pytest.raises(ParseError, match="not an integer"):
            parse_labels('X1="Diag A"')

    def test_empty_name(self):
        """Test an entry with an empty label."""
        with pytest.raises(ParseError, match="empty"):
            parse_labels('1=""')

    def test_unbalanced_quotes(self):
        """Test an unterminated quoted label."""
        with pytest.raises(ParseError, match="quotes"):
            parse_labels('1="Diag A')

    def test_duplicate_id(self):
        """Test that a repeated id invalidates the catalog."""
        with pytest.raises(ParseError, match="Duplicate"):
            parse_labels('1="Diag A" 1="Diag B"')

    def test_empty_text(self):
        """Test text with no entries."""
        with pytest.raises(ParseError, match="No category labels"):
            parse_labels("  \n LABEL\n ;\n")

    def test_error_names_artifact(self):
        """Test that the artifact name is reported."""
        with pytest.raises(ParseError) as exc_info:
            parse_labels('bad', artifact="labels.txt")

        assert exc_info.value.artifact == "labels.txt"
        assert "labels.txt" in str(exc_info.value)


class TestLoadLabels:
    """Test loading labels from files."""

    def test_sample_file(self):
        """Test the bundled sample label file."""
        catalog = load_labels(DATA_DIR / "V22H79L1.TXT")

        ids = [label.id for label in catalog]
        assert ids[0] == 1
        assert 19 in ids
        assert 85 in ids
        assert len(ids) == len(set(ids))

        names = {label.id: label.name for label in catalog}
        assert names[87] == "Unstable Angina and Other Acute Ischemic Heart Disease"

    def test_byte_order_mark(self, tmp_path):
        """Test that a leading byte order mark does not break the first entry."""
        path = tmp_path / "labels_bom.txt"
        path.write_bytes(b'\xef\xbb\xbfHCC1="HIV/AIDS"\nHCC2="Septicemia"\n')

        catalog = load_labels(path)

        assert [label.id for label in catalog] == [1, 2]

    def test_file_error_reports_file_name(self, tmp_path):
        """Test that a malformed file fails with its file name."""
        path = tmp_path / "broken_labels.txt"
        path.write_text('HCC1="HIV/AIDS"\nHCCX="Bad"\n')

        with pytest.raises(ParseError) as exc_info:
            load_labels(path)

        assert exc_info.value.artifact == "broken_labels.txt"
