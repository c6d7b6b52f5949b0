from __future__ import annotations
import argparse
import csv
import logging
import multiprocessing
import os
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Tuple
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))
from harness import report
from harness.experiment import PROCEDURES, ExperimentConfig, run_file
from solvers.annealing import AnnealingConfig
from solvers.grasp import RCL_POLICIES, GraspConfig
from solvers.ils import ILSConfig
from solvers.tabu import TabuConfig
from utils.cnf_parser import CNFParseError

logger = logging.getLogger(__name__)

FIELDNAMES = [
    "solver",
    "benchmark_file",
    "run",
    "seed",
    "num_vars",
    "num_clauses",
    "cost",
    "cpu_time",
    "elapsed_time",
    "flips",
    "evaluations",
    "verified",
]

def collect_files(paths: Iterable[str]) -> List[Path]:
    files: List[Path] = []
    for raw in paths:
        target = Path(raw)
        if target.is_file() and target.suffix == ".cnf":
            files.append(target)
        elif target.is_dir():
            for path in sorted(target.rglob("*.cnf")):
                files.append(path)
        else:
            logger.warning("ignoring %s: not a .cnf file or directory", target)
    return files

def build_config(args: argparse.Namespace) -> ExperimentConfig:
    return ExperimentConfig(
        runs=args.runs,
        procedures=tuple(args.procedures),
        ils=ILSConfig(args.ils_iterations, args.ils_perturbation),
        tabu=TabuConfig(args.tabu_iterations, args.tabu_tenure, args.tabu_jitter),
        annealing=AnnealingConfig(
            args.sa_initial_temperature,
            args.sa_cooling,
            args.sa_moves_per_temperature,
            args.sa_min_temperature,
        ),
        grasp=GraspConfig(args.grasp_restarts, args.grasp_alpha, args.grasp_rcl_policy),
        seed=args.seed,
    )

def run_worker(task: Tuple[str, ExperimentConfig, int]) -> Tuple[str, List[Dict[str, object]]]:
    path, config, worker_index = task
    try:
        return path, run_file(path, config, worker_index)
    except (CNFParseError, OSError) as exc:
        logger.error("skipping %s: %s", path, exc)
        return path, []

def run_benchmarks(
    files: List[Path],
    config: ExperimentConfig,
    output: Path,
    workers: int = 1,
    stream=None,
) -> List[Dict[str, object]]:
    stream = stream or sys.stdout
    output.parent.mkdir(parents=True, exist_ok=True)
    tasks = [(str(path), config, index) for index, path in enumerate(files)]
    rule = "=" * len(report.header(config.procedures).splitlines()[0])
    stream.write(f"{rule}\n COMPARATIVE REPORT, {config.runs} RUNS PER PROCEDURE\n{rule}\n")
    stream.write(report.header(config.procedures) + "\n")
    stream.flush()
    collected: List[Dict[str, object]] = []
    with output.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=FIELDNAMES)
        writer.writeheader()
        if workers <= 1:
            results = map(run_worker, tasks)
            _drain(results, config, writer, handle, stream, collected)
        else:
            with multiprocessing.Pool(processes=workers) as pool:
                results = pool.imap_unordered(run_worker, tasks)
                _drain(results, config, writer, handle, stream, collected)
    stream.write(rule + "\n")
    stream.flush()
    return collected

def _drain(results, config, writer, handle, stream, collected) -> None:
    for path, records in results:
        if not records:
            continue
        writer.writerows(records)
        handle.flush()
        line = report.format_row(path, records, config.procedures)
        stream.write(line + "\n")
        stream.flush()
        collected.extend(records)

def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--benchmarks", nargs="+", required=True)
    parser.add_argument("--output", default="results/results.csv")
    parser.add_argument("--procedures", nargs="+", choices=PROCEDURES, default=list(PROCEDURES))
    parser.add_argument("--runs", type=int, default=30)
    parser.add_argument("--ils-iterations", type=int, default=20)
    parser.add_argument("--ils-perturbation", type=float, default=0.05)
    parser.add_argument("--tabu-iterations", type=int, default=100)
    parser.add_argument("--tabu-tenure", type=int, default=None)
    parser.add_argument("--tabu-jitter", type=int, default=5)
    parser.add_argument("--sa-initial-temperature", type=float, default=10.0)
    parser.add_argument("--sa-cooling", type=float, default=0.98)
    parser.add_argument("--sa-moves-per-temperature", type=int, default=100)
    parser.add_argument("--sa-min-temperature", type=float, default=0.01)
    parser.add_argument("--grasp-restarts", type=int, default=20)
    parser.add_argument("--grasp-alpha", type=float, default=0.2)
    parser.add_argument("--grasp-rcl-policy", choices=RCL_POLICIES, default="value")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--workers", type=int, default=os.cpu_count() or 1)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=args.log_level,
        stream=sys.stderr,
    )
    try:
        config = build_config(args)
    except ValueError as exc:
        parser.error(str(exc))
    files = collect_files(args.benchmarks)
    if not files:
        parser.error("no .cnf files found")
    workers = max(1, min(args.workers, len(files)))
    logger.info("running %d files on %d workers", len(files), workers)
    run_benchmarks(files, config, Path(args.output), workers)

if __name__ == "__main__":
    main()
