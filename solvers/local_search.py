from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, Optional

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from solvers.constructive import construct
from solvers.model import Assignment, Formula, SearchStats, flip, to_bits
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)


def local_search(formula: Formula, assignment: Assignment, stats: Optional[SearchStats] = None) -> int:
    cost = formula.cost(assignment)
    improved = True
    while improved:
        improved = False
        for index in formula.candidate_variables(assignment):
            delta = formula.flip_delta(assignment, index)
            if stats is not None:
                stats.evaluations += 1
            if delta < 0:
                flip(assignment, index)
                cost += delta
                improved = True
                if stats is not None:
                    stats.flips += 1
                break
    return cost


def run_solver(path: Path) -> Dict[str, object]:
    formula = Formula.from_cnf(parse_dimacs(path))
    assignment = construct(formula, formula.frequencies())
    initial_cost = formula.cost(assignment)
    stats = SearchStats()
    cost = local_search(formula, assignment, stats)
    logger.debug("local search %d -> %d after %d flips", initial_cost, cost, stats.flips)
    return {
        "solver": "local_search",
        "initial_cost": initial_cost,
        "cost": cost,
        **stats.as_dict(),
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
