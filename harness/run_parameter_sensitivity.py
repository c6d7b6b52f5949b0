import argparse
import csv
import dataclasses
import logging
import random
import sys
import time
from pathlib import Path
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))
from harness.experiment import ExperimentConfig, run_procedure, worker_seed
from solvers.constructive import construct
from solvers.model import Formula, SearchStats
from utils.cnf_parser import parse_dimacs

logger = logging.getLogger(__name__)

SWEEPABLE = ("ils", "tabu", "annealing", "grasp")
CASTS = {"int": int, "Optional[int]": int, "float": float, "str": str}

def sweep_configs(solver: str, parameter: str, values):
    base = ExperimentConfig(runs=1)
    section = getattr(base, solver)
    kinds = {item.name: str(item.type) for item in dataclasses.fields(section)}
    if parameter not in kinds:
        raise ValueError(f"{solver} has no parameter {parameter!r}; choose from {sorted(kinds)}")
    cast = CASTS[kinds[parameter]]
    configs = []
    for raw in values:
        value = cast(raw)
        updated = dataclasses.replace(section, **{parameter: value})
        configs.append((value, dataclasses.replace(base, **{solver: updated})))
    return configs

def run_experiment(benchmarks_dir: Path, output_file: Path, solver: str, parameter: str, values, runs: int, seed: int = 0):
    benchmark_files = sorted(benchmarks_dir.glob("*.cnf"))
    if not benchmark_files:
        logger.warning("no .cnf files under %s", benchmarks_dir)
        return []
    configs = sweep_configs(solver, parameter, values)
    results = []
    for index, cnf_path in enumerate(benchmark_files):
        formula = Formula.from_cnf(parse_dimacs(cnf_path))
        template = formula.frequencies()
        baseline = construct(formula, template)
        for value, config in configs:
            rng = random.Random(worker_seed(cnf_path, index, seed))
            for run in range(runs):
                start_time = time.perf_counter()
                _, cost = run_procedure(solver, formula, template, baseline, config, rng, SearchStats())
                elapsed = time.perf_counter() - start_time
                results.append({
                    "solver": solver,
                    "benchmark_file": cnf_path.name,
                    "parameter": parameter,
                    "value": value,
                    "run": run,
                    "cost": cost,
                    "elapsed_time": elapsed
                })
            logger.info("%s %s=%s on %s done", solver, parameter, value, cnf_path.name)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    fieldnames = ["solver", "benchmark_file", "parameter", "value", "run", "cost", "elapsed_time"]

    with open(output_file, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(results)
    return results

def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--benchmarks", default="benchmarks/random_maxsat")
    parser.add_argument("--output", default="results/parameter_sensitivity.csv")
    parser.add_argument("--solver", choices=SWEEPABLE, default="grasp")
    parser.add_argument("--parameter", default="alpha")
    parser.add_argument("--values", nargs="+", default=["0.0", "0.1", "0.2", "0.5", "1.0"])
    parser.add_argument("--runs", type=int, default=5)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=args.log_level)
    try:
        run_experiment(Path(args.benchmarks), Path(args.output), args.solver, args.parameter, args.values, args.runs, args.seed)
    except ValueError as exc:
        parser.error(str(exc))

if __name__ == "__main__":
    main()
