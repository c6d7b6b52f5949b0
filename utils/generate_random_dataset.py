import argparse
import random
import sys
from pathlib import Path
from typing import List

# Add project root to sys.path to allow importing from utils
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from utils.cnf_parser import CNFFormula


def random_kcnf(num_vars: int, num_clauses: int, k: int, rng: random.Random) -> CNFFormula:
    if k > num_vars:
        raise ValueError(f"cannot draw {k} distinct variables out of {num_vars}")
    clauses: List[List[int]] = []
    for _ in range(num_clauses):
        variables = rng.sample(range(1, num_vars + 1), k)
        clauses.append([var if rng.random() < 0.5 else -var for var in variables])
    return CNFFormula(num_vars=num_vars, num_clauses=num_clauses, clauses=clauses)


def write_dimacs(path: Path, formula: CNFFormula, comment: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        if comment:
            handle.write(f"c {comment}\n")
        handle.write(f"p cnf {formula.num_vars} {len(formula.clauses)}\n")
        for clause in formula.clauses:
            line = " ".join(str(lit) for lit in clause) + " 0\n"
            handle.write(line)


def generate_dataset(output_dir: Path, sizes: List[int], ratio: float, k: int, count: int, seed: int) -> List[Path]:
    rng = random.Random(seed)
    written = []
    for num_vars in sizes:
        num_clauses = int(round(num_vars * ratio))
        for i in range(count):
            formula = random_kcnf(num_vars, num_clauses, k, rng)
            filename = output_dir / f"random_{k}cnf_{num_vars}v_{num_clauses}c_{i+1:02d}.cnf"
            write_dimacs(filename, formula, comment=f"random {k}-CNF, seed {seed}")
            written.append(filename)
    return written


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--output-dir", default="benchmarks/random_maxsat")
    parser.add_argument("--vars", nargs="+", type=int, default=[50, 100, 200])
    parser.add_argument("--ratio", type=float, default=6.0)
    parser.add_argument("--k", type=int, default=3)
    parser.add_argument("--count", type=int, default=5)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()
    generate_dataset(Path(args.output_dir), args.vars, args.ratio, args.k, args.count, args.seed)
