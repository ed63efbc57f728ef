import pytest

from emucheck.errors import FormatError
from emucheck.io.calibration_file import Row, parse_float, parse_header, parse_int, read_rows


def test_read_rows_skips_blank_lines(tmp_path):
    path = tmp_path / "f.csv"
    path.write_text("a,b,c\n\n,,\n1,2,3\n")
    rows = read_rows(path)
    assert [r.cells for r in rows] == [["a", "b", "c"], ["1", "2", "3"]]
    assert [r.number for r in rows] == [1, 4]


def test_read_rows_handles_bom(tmp_path):
    path = tmp_path / "f.csv"
    path.write_bytes("\ufeffSynergy1,,\n".encode("utf-8"))
    assert read_rows(path)[0].cells[0] == "Synergy1"


def test_read_rows_width_mismatch(tmp_path):
    path = tmp_path / "f.csv"
    path.write_text("a,b,c\n1,2\n")
    with pytest.raises(FormatError, match=r"row 2: expected 3 columns, found 2"):
        read_rows(path)


def test_parse_header(tmp_path):
    path = tmp_path / "f.csv"
    path.write_text("M1,,,\nApplicator,A10,,\nDimensions,id,6,9\n100,,1,1\n")
    header, start = parse_header(path, read_rows(path))
    assert header.machine == "M1"
    assert header.applicator == "A10"
    assert header.energies == [6.0, 9.0]
    assert start == 3


def test_parse_header_keeps_names_verbatim(tmp_path):
    path = tmp_path / "f.csv"
    path.write_text("Synergy 1 ,,,\nAPPLICATOR,a10,,\ndimensions,ID,6,9\n")
    header, _ = parse_header(path, read_rows(path))
    assert header.machine == "Synergy 1 "
    assert header.applicator == "a10"


@pytest.mark.parametrize("content, message", [
    ("M1,,,\nApplicatr,A10,,\nDimensions,id,6,9\n", "expected label 'Applicator' in column 1"),
    ("M1,,,\nApplicator,A10,,\nSize,id,6,9\n", "expected label 'Dimensions' in column 1"),
    ("M1,,,\nApplicator,A10,,\nDimensions,nr,6,9\n", "expected label 'id' in column 2"),
    ("M1,,,\nApplicator,,,\nDimensions,id,6,9\n", "missing applicator name"),
    (",x,,\nApplicator,A10,,\nDimensions,id,6,9\n", "missing machine name"),
    ("M1,,,\nApplicator,A10,,\n", "expected 3 header rows"),
    ("M1,,,\nApplicator,A10,,\nDimensions,id,6,six\n", "energy in column 4 is not a number"),
    ("M1,,,\nApplicator,A10,,\nDimensions,id,6,6\n", "duplicate energies"),
    ("M1,\nApplicator,A10\nDimensions,id\n", "expected at least 3 columns"),
])
def test_parse_header_errors(tmp_path, content, message):
    path = tmp_path / "f.csv"
    path.write_text(content)
    with pytest.raises(FormatError, match=message):
        parse_header(path, read_rows(path))


def test_parse_float_rejects_non_finite():
    row = Row(7, ["nan", "inf", "1e3"])
    with pytest.raises(FormatError, match="row 7: SSD in column 1 must be finite"):
        parse_float("f.csv", row, 0, "SSD")
    with pytest.raises(FormatError, match="must be finite"):
        parse_float("f.csv", row, 1, "SSD")
    assert parse_float("f.csv", row, 2, "SSD") == 1000.0


def test_parse_int():
    row = Row(5, ["10", " 10.0 ", "1.5", "-1", "x"])
    assert parse_int("f.csv", row, 0, "id") == 10
    assert parse_int("f.csv", row, 1, "id") == 10
    with pytest.raises(FormatError, match="not an integer"):
        parse_int("f.csv", row, 2, "id")
    with pytest.raises(FormatError, match="must be non-negative"):
        parse_int("f.csv", row, 3, "id")
    with pytest.raises(FormatError, match="not an integer"):
        parse_int("f.csv", row, 4, "id")


def test_read_rows_invalid_utf8(tmp_path):
    path = tmp_path / "f.csv"
    path.write_bytes(b"Synergy1,,\nApplicator,A\xff10,\n")
    with pytest.raises(FormatError, match="not valid UTF-8") as exc_info:
        read_rows(path)
    assert exc_info.value.path == str(path)
