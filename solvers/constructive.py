from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from solvers.model import Assignment, ClauseState, Formula, FrequencyTable, TBool, to_bits, unassigned
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)


def select_variable(frequencies: FrequencyTable) -> int:
    best = 0
    for index in range(1, len(frequencies)):
        if frequencies.total(index) > frequencies.total(best):
            best = index
    return best


def construct(formula: Formula, frequencies: FrequencyTable) -> Assignment:
    frecs = frequencies.copy()
    assignment = unassigned(formula.num_vars)
    states = [ClauseState.UNKNOWN] * len(formula.clauses)
    for _ in range(formula.num_vars):
        index = select_variable(frecs)
        if frecs.pos[index] <= 0 and frecs.neg[index] <= 0:
            break
        assignment[index] = TBool.TRUE if frecs.polarity(index) else TBool.FALSE
        frecs.fix(index)
        for position in formula.occurrences[index]:
            if states[position] is not ClauseState.UNKNOWN:
                continue
            clause = formula.clauses[position]
            states[position] = clause.state(assignment)
            if states[position] is ClauseState.UNKNOWN:
                continue
            for literal in clause.literals:
                if not frecs.is_fixed(abs(literal) - 1):
                    frecs.decrement(literal)
    for index, value in enumerate(assignment):
        if value == TBool.UNASSIGNED:
            assignment[index] = TBool.FALSE
    logger.debug("constructive assignment built for %d variables", formula.num_vars)
    return assignment


def run_solver(path: Path) -> Dict[str, object]:
    formula = Formula.from_cnf(parse_dimacs(path))
    assignment = construct(formula, formula.frequencies())
    return {
        "solver": "constructive",
        "cost": formula.cost(assignment),
        "num_vars": formula.num_vars,
        "num_clauses": len(formula),
        "assignment": to_bits(assignment),
    }


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--cnf", required=True)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=args.log_level)
    start = time.perf_counter()
    result = run_solver(Path(args.cnf))
    result["wall_time"] = time.perf_counter() - start
    print(json.dumps(result))


if __name__ == "__main__":
    main()
