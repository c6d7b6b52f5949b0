from __future__ import annotations

import logging
import random
import sys
import time
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from solvers.annealing import AnnealingConfig, simulated_annealing
from solvers.constructive import construct
from solvers.grasp import GraspConfig, grasp
from solvers.ils import ILSConfig, iterated_local_search
from solvers.local_search import local_search
from solvers.model import Assignment, Formula, FrequencyTable, SearchStats, is_complete
from solvers.tabu import TabuConfig, tabu_search
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)

PROCEDURES = ("constructive", "local_search", "ils", "tabu", "annealing", "grasp")


@dataclass(frozen=True)
class ExperimentConfig:
    runs: int = 30
    procedures: Tuple[str, ...] = PROCEDURES
    ils: ILSConfig = field(default_factory=ILSConfig)
    tabu: TabuConfig = field(default_factory=TabuConfig)
    annealing: AnnealingConfig = field(default_factory=AnnealingConfig)
    grasp: GraspConfig = field(default_factory=GraspConfig)
    seed: int = 0

    def __post_init__(self) -> None:
        if self.runs < 1:
            raise ValueError("runs must be at least 1")
        unknown = [name for name in self.procedures if name not in PROCEDURES]
        if unknown:
            raise ValueError(f"unknown procedures: {', '.join(unknown)}")


def worker_seed(path: str | Path, worker_index: int, base_seed: int = 0) -> int:
    return zlib.crc32(Path(path).name.encode("utf-8")) + worker_index + base_seed


def run_procedure(
    name: str,
    formula: Formula,
    template: FrequencyTable,
    baseline: Assignment,
    config: ExperimentConfig,
    rng: random.Random,
    stats: SearchStats,
) -> Tuple[Assignment, int]:
    """Run one search procedure from a copy of the constructive baseline."""
    if name == "local_search":
        assignment = list(baseline)
        return assignment, local_search(formula, assignment, stats)
    if name == "ils":
        return iterated_local_search(formula, list(baseline), config.ils, rng, stats)
    if name == "tabu":
        return tabu_search(formula, list(baseline), config.tabu, rng, stats)
    if name == "annealing":
        return simulated_annealing(formula, list(baseline), config.annealing, rng, stats)
    if name == "grasp":
        return grasp(formula, template, config.grasp, rng, stats)
    raise ValueError(f"unknown procedure {name!r}")


def _record(
    name: str,
    path: Path,
    run: int,
    seed: int,
    formula: Formula,
    assignment: Assignment,
    cost: int,
    elapsed: float,
    cpu_used: float,
    stats: SearchStats,
) -> Dict[str, object]:
    verified = is_complete(assignment) and formula.cost(assignment) == cost
    if not verified:
        logger.warning("%s on %s run %d reported cost %d that does not verify", name, path, run, cost)
    return {
        "solver": name,
        "benchmark_file": str(path),
        "run": run,
        "seed": seed,
        "num_vars": formula.num_vars,
        "num_clauses": len(formula),
        "cost": cost,
        "cpu_time": cpu_used,
        "elapsed_time": elapsed,
        "flips": stats.flips,
        "evaluations": stats.evaluations,
        "verified": verified,
    }


def run_file(
    path: str | Path,
    config: ExperimentConfig,
    worker_index: int = 0,
) -> List[Dict[str, object]]:
    target = Path(path)
    formula = Formula.from_cnf(parse_dimacs(target))
    template = formula.frequencies()
    seed = worker_seed(target, worker_index, config.seed)
    rng = random.Random(seed)
    logger.info("running %s (%d vars, %d clauses, seed %d)", target, formula.num_vars, len(formula), seed)
    records: List[Dict[str, object]] = []
    for run in range(config.runs):
        start_wall = time.perf_counter()
        start_cpu = time.process_time()
        baseline = construct(formula, template)
        elapsed = time.perf_counter() - start_wall
        cpu_used = time.process_time() - start_cpu
        if "constructive" in config.procedures:
            records.append(
                _record(
                    "constructive", target, run, seed, formula, list(baseline),
                    formula.cost(baseline), elapsed, cpu_used, SearchStats(),
                )
            )
        for name in config.procedures:
            if name == "constructive":
                continue
            stats = SearchStats()
            start_wall = time.perf_counter()
            start_cpu = time.process_time()
            assignment, cost = run_procedure(name, formula, template, baseline, config, rng, stats)
            elapsed = time.perf_counter() - start_wall
            cpu_used = time.process_time() - start_cpu
            records.append(_record(name, target, run, seed, formula, assignment, cost, elapsed, cpu_used, stats))
    return records
