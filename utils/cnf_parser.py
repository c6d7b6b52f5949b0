from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List


class CNFParseError(ValueError):
    pass


@dataclass
class CNFFormula:
    num_vars: int
    num_clauses: int
    clauses: List[List[int]]


def _parse_lines(lines: Iterable[str], source: str) -> CNFFormula:
    clauses: List[List[int]] = []
    current: List[int] = []
    num_vars = -1
    num_clauses = 0
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("c"):
            continue
        if line.startswith("%"):
            break
        if line.startswith("p"):
            parts = line.split()
            if len(parts) < 4 or parts[1] != "cnf":
                raise CNFParseError(f"{source}:{number}: malformed preamble {line!r}")
            try:
                num_vars = int(parts[2])
                num_clauses = int(parts[3])
            except ValueError as exc:
                raise CNFParseError(f"{source}:{number}: malformed preamble {line!r}") from exc
            if num_vars < 0 or num_clauses < 0:
                raise CNFParseError(f"{source}:{number}: negative counts in preamble")
            continue
        if num_vars < 0:
            raise CNFParseError(f"{source}:{number}: clause data before the preamble")
        for token in line.split():
            try:
                literal = int(token)
            except ValueError as exc:
                raise CNFParseError(f"{source}:{number}: invalid literal {token!r}") from exc
            if literal == 0:
                if current:
                    clauses.append(current)
                current = []
                continue
            if abs(literal) > num_vars:
                raise CNFParseError(
                    f"{source}:{number}: literal {literal} exceeds declared {num_vars} variables"
                )
            current.append(literal)
    if current:
        clauses.append(current)
    if num_vars < 0:
        num_vars = 0
    if not num_clauses:
        num_clauses = len(clauses)
    return CNFFormula(num_vars=num_vars, num_clauses=num_clauses, clauses=clauses)


def parse_dimacs(path: str | Path) -> CNFFormula:
    target = Path(path)
    with target.open("r", encoding="utf-8") as handle:
        try:
            return _parse_lines(handle, str(target))
        except UnicodeDecodeError as exc:
            raise CNFParseError(f"{target}: not UTF-8 text ({exc.reason})") from exc


def parse_from_string(data: str) -> CNFFormula:
    return _parse_lines(data.splitlines(), "<string>")
