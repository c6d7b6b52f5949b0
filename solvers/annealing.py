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
from solvers.model import Assignment, Formula, Incumbent, SearchStats, flip, to_bits
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnealingConfig:
    initial_temperature: float = 10.0
    cooling: float = 0.98
    moves_per_temperature: int = 100
    min_temperature: float = 0.01

    def __post_init__(self) -> None:
        if self.initial_temperature <= 0 or self.min_temperature <= 0:
            raise ValueError("temperatures must be positive")
        if not 0.0 < self.cooling < 1.0:
            raise ValueError("cooling must lie in (0, 1)")
        if self.moves_per_temperature < 0:
            raise ValueError("moves_per_temperature must be non-negative")


def acceptance_probability(delta: int, temperature: float) -> float:
    if delta < 0:
        return 1.0
    return math.exp(-delta / temperature)


def simulated_annealing(
    formula: Formula,
    assignment: Assignment,
    config: AnnealingConfig,
    rng: random.Random,
    stats: Optional[SearchStats] = None,
) -> Tuple[Assignment, int]:
    current = list(assignment)
    cost = formula.cost(current)
    incumbent = Incumbent()
    incumbent.offer(current, cost)
    if formula.num_vars == 0:
        return incumbent.assignment, incumbent.cost
    temperature = config.initial_temperature
    while temperature > config.min_temperature and incumbent.cost > 0:
        for _ in range(config.moves_per_temperature):
            index = rng.randrange(formula.num_vars)
            delta = formula.flip_delta(current, index)
            if stats is not None:
                stats.evaluations += 1
            if delta < 0:
                flip(current, index)
                cost += delta
                incumbent.offer(current, cost)
            elif rng.random() < acceptance_probability(delta, temperature):
                flip(current, index)
                cost += delta
                if stats is not None and delta > 0:
                    stats.worsening_accepted += 1
            else:
                continue
            if stats is not None:
                stats.flips += 1
        temperature *= config.cooling
        if stats is not None:
            stats.iterations += 1
    logger.debug("annealing stopped at T=%.4f with best cost %d", temperature, incumbent.cost)
    return incumbent.assignment, incumbent.cost


def run_solver(
    path: Path,
    initial_temperature: float,
    cooling: float,
    moves_per_temperature: int,
    min_temperature: float,
    seed: int | None,
) -> Dict[str, object]:
    formula = Formula.from_cnf(parse_dimacs(path))
    start = construct(formula, formula.frequencies())
    stats = SearchStats()
    config = AnnealingConfig(initial_temperature, cooling, moves_per_temperature, min_temperature)
    assignment, cost = simulated_annealing(formula, start, config, random.Random(seed), stats)
    return {
        "solver": "annealing",
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
    parser.add_argument("--initial-temperature", type=float, default=10.0)
    parser.add_argument("--cooling", type=float, default=0.98)
    parser.add_argument("--moves-per-temperature", type=int, default=100)
    parser.add_argument("--min-temperature", type=float, default=0.01)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=args.log_level)
    start = time.perf_counter()
    result = run_solver(
        Path(args.cnf),
        args.initial_temperature,
        args.cooling,
        args.moves_per_temperature,
        args.min_temperature,
        args.seed,
    )
    result["wall_time"] = time.perf_counter() - start
    print(json.dumps(result))


if __name__ == "__main__":
    main()
