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
from typing import Dict, List, Optional, Tuple

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from solvers.local_search import local_search
from solvers.model import Assignment, Formula, FrequencyTable, Incumbent, SearchStats, TBool, to_bits, unassigned
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)

RCL_POLICIES = ("value", "cardinality")


@dataclass(frozen=True)
class GraspConfig:
    restarts: int = 20
    alpha: float = 0.2
    rcl_policy: str = "value"

    def __post_init__(self) -> None:
        if self.restarts < 1:
            raise ValueError("restarts must be at least 1")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError("alpha must lie in [0, 1]")
        if self.rcl_policy not in RCL_POLICIES:
            raise ValueError(f"unknown RCL policy {self.rcl_policy!r}, expected one of {RCL_POLICIES}")


def restricted_candidates(candidates: List[Tuple[int, int]], alpha: float, policy: str) -> List[int]:
    if policy == "cardinality":
        size = max(1, math.ceil(alpha * len(candidates)))
        ranked = sorted(candidates, key=lambda item: (-item[1], item[0]))
        return [index for index, _ in ranked[:size]]
    benefits = [benefit for _, benefit in candidates]
    s_max = max(benefits)
    s_min = min(benefits)
    threshold = s_max - alpha * (s_max - s_min)
    return [index for index, benefit in candidates if benefit >= threshold]


def grasp_construct(
    formula: Formula,
    frequencies: FrequencyTable,
    config: GraspConfig,
    rng: random.Random,
) -> Assignment:
    frecs = frequencies.copy()
    assignment = unassigned(formula.num_vars)
    for _ in range(formula.num_vars):
        candidates = [
            (index, frecs.benefit(index))
            for index in range(formula.num_vars)
            if assignment[index] == TBool.UNASSIGNED
        ]
        rcl = restricted_candidates(candidates, config.alpha, config.rcl_policy)
        assert rcl, "restricted candidate list is empty"
        chosen = rcl[rng.randrange(len(rcl))]
        assignment[chosen] = TBool.TRUE if frecs.polarity(chosen) else TBool.FALSE
        frecs.fix(chosen)
    return assignment


def grasp(
    formula: Formula,
    frequencies: FrequencyTable,
    config: GraspConfig,
    rng: random.Random,
    stats: Optional[SearchStats] = None,
) -> Tuple[Assignment, int]:
    incumbent = Incumbent()
    for restart in range(config.restarts):
        current = grasp_construct(formula, frequencies, config, rng)
        cost = local_search(formula, current, stats)
        if stats is not None:
            stats.restarts += 1
        if incumbent.offer(current, cost):
            logger.debug("grasp restart %d improved to %d", restart, cost)
        if incumbent.cost == 0:
            break
    return incumbent.assignment, incumbent.cost


def run_solver(path: Path, restarts: int, alpha: float, rcl_policy: str, seed: int | None) -> Dict[str, object]:
    formula = Formula.from_cnf(parse_dimacs(path))
    stats = SearchStats()
    assignment, cost = grasp(
        formula, formula.frequencies(), GraspConfig(restarts, alpha, rcl_policy), random.Random(seed), stats
    )
    return {
        "solver": "grasp",
        "cost": cost,
        **stats.as_dict(),
        "num_vars": formula.num_vars,
        "num_clauses": len(formula),
        "assignment": to_bits(assignment),
    }


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--cnf", required=True)
    parser.add_argument("--restarts", type=int, default=20)
    parser.add_argument("--alpha", type=float, default=0.2)
    parser.add_argument("--rcl-policy", choices=RCL_POLICIES, default="value")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=args.log_level)
    start = time.perf_counter()
    result = run_solver(Path(args.cnf), args.restarts, args.alpha, args.rcl_policy, args.seed)
    result["wall_time"] = time.perf_counter() - start
    print(json.dumps(result))


if __name__ == "__main__":
    main()
