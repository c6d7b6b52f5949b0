import pytest

from utils.cnf_parser import CNFParseError, parse_dimacs, parse_from_string


def test_parses_comments_preamble_and_clauses():
    cnf = parse_from_string("c example\np cnf 3 2\n1 2 0\n-1 -2 -3 0\n")
    assert cnf.num_vars == 3
    assert cnf.num_clauses == 2
    assert cnf.clauses == [[1, 2], [-1, -2, -3]]


def test_zero_terminates_clauses_across_and_within_lines():
    cnf = parse_from_string("p cnf 3 3\n1 0 -2 0\n3\n-1 0\n")
    assert cnf.clauses == [[1], [-2], [3, -1]]


def test_percent_line_ends_the_clause_section():
    cnf = parse_from_string("p cnf 2 1\n1 -2 0\n%\n0\n\n")
    assert cnf.clauses == [[1, -2]]


def test_empty_formula_has_no_clauses():
    cnf = parse_from_string("p cnf 0 0\n")
    assert cnf.num_vars == 0
    assert cnf.clauses == []


@pytest.mark.parametrize(
    "text",
    [
        "p cnf 2 1\n1 3 0\n",
        "1 2 0\np cnf 2 1\n",
        "p cnf 2 1\n1 x 0\n",
        "p cnf two 1\n1 0\n",
        "p dnf 2 1\n1 0\n",
    ],
)
def test_malformed_input_raises(text):
    with pytest.raises(CNFParseError):
        parse_from_string(text)


def test_parse_error_is_a_value_error():
    assert issubclass(CNFParseError, ValueError)


def test_parse_dimacs_reads_file(write_cnf):
    path = write_cnf("tiny.cnf", "c tiny\np cnf 2 2\n1 2 0\n-2 0\n")
    cnf = parse_dimacs(path)
    assert cnf.num_vars == 2
    assert cnf.clauses == [[1, 2], [-2]]


def test_parse_error_names_the_file(write_cnf):
    path = write_cnf("bad.cnf", "p cnf 1 1\n2 0\n")
    with pytest.raises(CNFParseError, match="bad.cnf:2"):
        parse_dimacs(path)


def test_undecodable_bytes_raise_parse_error(tmp_path):
    path = tmp_path / "binary.cnf"
    path.write_bytes(b"c \xff\xfe\np cnf 1 1\n1 0\n")
    with pytest.raises(CNFParseError, match="binary.cnf"):
        parse_dimacs(path)
