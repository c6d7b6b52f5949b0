from __future__ import annotations

import argparse
import json
import logging
import math
import random
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from solvers.constructive import construct
from solvers.local_search import local_search
from solvers.model import Assignment, Formula, Incumbent, SearchStats, flip, to_bits
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ILSConfig:
    iterations: int = 20
    perturbation: float = 0.05

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ValueError("iterations must be non-negative")
        if not 0.0 < self.perturbation <= 1.0:
            raise ValueError("perturbation must lie in (0, 1]")


def perturbation_size(num_vars: int, fraction: float) -> int:
    return max(1, math.ceil(num_vars * fraction))


def perturb(assignment: Assignment, k: int, rng: random.Random) -> None:
    for _ in range(k):
        flip(assignment, rng.randrange(len(assignment)))


def iterated_local_search(
    formula: Formula,
    assignment: Assignment,
    config: ILSConfig,
    rng: random.Random,
    stats: Optional[SearchStats] = None,
) -> Tuple[Assignment, int]:
    incumbent = Incumbent()
    incumbent.offer(assignment, formula.cost(assignment))
    if formula.num_vars == 0:
        return incumbent.assignment, incumbent.cost
    k = perturbation_size(formula.num_vars, config.perturbation)
    for _ in range(config.iterations):
        if incumbent.cost == 0:
            break
        current = list(incumbent.assignment)
        perturb(current, k, rng)
        cost = local_search(formula, current, stats)
        if stats is not None:
            stats.iterations += 1
        if incumbent.offer(current, cost):
            logger.debug("ils improved to %d", cost)
    return incumbent.assignment, incumbent.cost


def run_solver(path: Path, iterations: int, perturbation: float, seed: int | None) -> Dict[str, object]:
    formula = Formula.from_cnf(parse_dimacs(path))
    start = construct(formula, formula.frequencies())
    stats = SearchStats()
    assignment, cost = iterated_local_search(
        formula, start, ILSConfig(iterations, perturbation), random.Random(seed), stats
    )
    return {
        "solver": "ils",
        "initial_cost": formula.cost(start),
        "cost": cost,
        **stats.as_dict(),
        "num_vars": formula.num_vars,
        "num_clauses": len(formula),
        "assignment": to_bits(assignment),
    }


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--cnf", required=True)
    parser.add_argument("--iterations", type=int, default=20)
    parser.add_argument("--perturbation", type=float, default=0.05)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=args.log_level)
    start = time.perf_counter()
    result = run_solver(Path(args.cnf), args.iterations, args.perturbation, args.seed)
    result["wall_time"] = time.perf_counter() - start
    print(json.dumps(result))


if __name__ == "__main__":
    main()
