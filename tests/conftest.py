import random
from pathlib import Path

import pytest

from solvers.model import Formula, TBool
from utils.generate_random_dataset import random_kcnf

ALL_SIGNS_3 = [
    [a, b, c]
    for a in (1, -1)
    for b in (2, -2)
    for c in (3, -3)
]


def random_formula(num_vars: int, num_clauses: int, seed: int, k: int = 3) -> Formula:
    cnf = random_kcnf(num_vars, num_clauses, k, random.Random(seed))
    return Formula(cnf.num_vars, cnf.clauses)


def unsatisfiable_formula(num_vars: int = 20, num_clauses: int = 80, seed: int = 3) -> Formula:
    """Random 3-CNF plus every sign pattern over variables 1..3, so cost is never 0."""
    cnf = random_kcnf(num_vars, num_clauses, 3, random.Random(seed))
    return Formula(num_vars, cnf.clauses + ALL_SIGNS_3)


def random_complete(num_vars: int, rng: random.Random):
    return [rng.choice((TBool.FALSE, TBool.TRUE)) for _ in range(num_vars)]


@pytest.fixture
def write_cnf(tmp_path: Path):
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def small_formula() -> Formula:
    return Formula(3, [[1, 2], [-1, -2, -3]])
