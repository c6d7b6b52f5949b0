import csv
import io
import random

import pandas as pd
import pytest

from harness import report
from harness.experiment import PROCEDURES, ExperimentConfig, run_file, run_procedure, worker_seed
from harness.run_experiments import FIELDNAMES, collect_files, run_benchmarks
from harness.run_parameter_sensitivity import run_experiment, sweep_configs
from solvers.annealing import AnnealingConfig
from solvers.constructive import construct
from solvers.grasp import GraspConfig
from solvers.ils import ILSConfig
from solvers.model import Formula, SearchStats, TBool
from solvers.tabu import TabuConfig
from utils.cnf_parser import parse_dimacs
from utils.generate_random_dataset import generate_dataset, random_kcnf, write_dimacs

FAST = ExperimentConfig(
    runs=2,
    ils=ILSConfig(iterations=3),
    tabu=TabuConfig(iterations=10),
    annealing=AnnealingConfig(initial_temperature=1.0, cooling=0.8, moves_per_temperature=20, min_temperature=0.1),
    grasp=GraspConfig(restarts=2),
)


@pytest.fixture
def benchmark_dir(tmp_path):
    rng = random.Random(0)
    for index, num_vars in enumerate((12, 16)):
        write_dimacs(tmp_path / f"inst_{index}.cnf", random_kcnf(num_vars, num_vars * 6, 3, rng))
    return tmp_path


@pytest.mark.parametrize(
    "mean, std, expected",
    [
        (12.345, 0.23, "12.3(2)"),
        (150.0, 25.0, "150(3)"),
        (1234.0, 150.0, "1200(2)"),
        (0.5, 0.096, "0.5(1)"),
        (3.0, 0.0, "3(0)"),
        (3.0, float("nan"), "3(0)"),
    ],
)
def test_format_measure(mean, std, expected):
    assert report.format_measure(mean, std) == expected


def test_short_name_keeps_the_tail():
    name = "benchmarks/random_maxsat/" + "x" * 40 + ".cnf"
    short = report.short_name(name)
    assert short.startswith("...")
    assert short.endswith(".cnf")
    assert len(short) == report.NAME_WIDTH - 2
    assert report.short_name("a.cnf") == "a.cnf"


def test_improvement_between_heuristic_and_ils():
    summary = pd.DataFrame({"solver": ["constructive", "ils"], "cost_mean": [10.0, 7.5]})
    assert report.improvement(summary) == pytest.approx(25.0)
    assert report.improvement(summary.iloc[:1]) == 0.0
    zero = pd.DataFrame({"solver": ["constructive", "ils"], "cost_mean": [0.0, 0.0]})
    assert report.improvement(zero) == 0.0


def test_worker_seed_depends_on_file_and_index():
    assert worker_seed("a/x.cnf", 0) == worker_seed("b/x.cnf", 0)
    assert worker_seed("x.cnf", 0) != worker_seed("x.cnf", 1)
    assert worker_seed("x.cnf", 0, 10) == worker_seed("x.cnf", 10)


def test_experiment_config_rejects_unknown_procedure():
    with pytest.raises(ValueError):
        ExperimentConfig(procedures=("gsat",))
    with pytest.raises(ValueError):
        ExperimentConfig(runs=0)


def test_run_file_records_every_procedure_and_verifies(benchmark_dir):
    records = run_file(benchmark_dir / "inst_0.cnf", FAST)
    assert len(records) == FAST.runs * len(PROCEDURES)
    assert {record["solver"] for record in records} == set(PROCEDURES)
    assert all(record["verified"] for record in records)
    by_run = {}
    for record in records:
        by_run.setdefault(record["run"], {})[record["solver"]] = record["cost"]
    for costs in by_run.values():
        for name in ("local_search", "ils", "tabu", "annealing"):
            assert costs[name] <= costs["constructive"]
    constructive = [record["cost"] for record in records if record["solver"] == "constructive"]
    assert len(set(constructive)) == 1


def test_run_procedure_starts_from_a_copy_of_the_baseline():
    formula = Formula(3, [[1], [2], [-3]])
    template = formula.frequencies()
    baseline = [TBool.FALSE, TBool.FALSE, TBool.TRUE]
    for name in PROCEDURES[1:]:
        assignment, cost = run_procedure(name, formula, template, baseline, FAST, random.Random(0), SearchStats())
        assert cost == formula.cost(assignment) <= formula.cost(baseline)
    assert baseline == [TBool.FALSE, TBool.FALSE, TBool.TRUE]
    with pytest.raises(ValueError):
        run_procedure("constructive", formula, template, construct(formula, template), FAST, random.Random(0), SearchStats())


def test_run_file_is_reproducible_per_worker(benchmark_dir):
    path = benchmark_dir / "inst_1.cnf"
    first = [record["cost"] for record in run_file(path, FAST, worker_index=3)]
    second = [record["cost"] for record in run_file(path, FAST, worker_index=3)]
    assert first == second


def test_summary_has_one_row_per_solver(benchmark_dir):
    records = run_file(benchmark_dir / "inst_0.cnf", FAST)
    summary = report.summarize(records)
    assert list(summary["solver"]) == list(PROCEDURES)
    assert (summary["runs"] == FAST.runs).all()
    line = report.format_row("inst_0.cnf", records, PROCEDURES)
    assert line.startswith("inst_0.cnf")
    assert line.endswith("%")
    assert line.count("| ") == 2 * len(PROCEDURES) + 1


def test_run_benchmarks_writes_csv_and_report(benchmark_dir, tmp_path):
    (benchmark_dir / "broken.cnf").write_text("p cnf 1 1\n5 0\n", encoding="utf-8")
    files = collect_files([str(benchmark_dir)])
    assert [path.name for path in files] == ["broken.cnf", "inst_0.cnf", "inst_1.cnf"]
    output = tmp_path / "out" / "results.csv"
    stream = io.StringIO()
    records = run_benchmarks(files, FAST, output, workers=1, stream=stream)
    assert len(records) == 2 * FAST.runs * len(PROCEDURES)
    with output.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        assert reader.fieldnames == FIELDNAMES
        rows = list(reader)
    assert len(rows) == len(records)
    assert {row["benchmark_file"] for row in rows} == {str(benchmark_dir / "inst_0.cnf"), str(benchmark_dir / "inst_1.cnf")}
    text = stream.getvalue()
    assert "Cost GRASP" in text
    assert sum(1 for line in text.splitlines() if "inst_" in line) == 2
    assert "broken.cnf" not in text


def test_run_benchmarks_skips_undecodable_file(benchmark_dir, tmp_path):
    (benchmark_dir / "binary.cnf").write_bytes(b"c \xff\xfe\np cnf 1 1\n1 0\n")
    files = collect_files([str(benchmark_dir)])
    assert files[0].name == "binary.cnf"
    stream = io.StringIO()
    records = run_benchmarks(files, FAST, tmp_path / "out" / "results.csv", workers=1, stream=stream)
    assert {record["benchmark_file"] for record in records} == {
        str(benchmark_dir / "inst_0.cnf"),
        str(benchmark_dir / "inst_1.cnf"),
    }
    assert "binary.cnf" not in stream.getvalue()


def test_parallel_run_matches_serial_run(benchmark_dir, tmp_path):
    write_dimacs(benchmark_dir / "inst_2.cnf", random_kcnf(14, 70, 3, random.Random(5)))
    files = collect_files([str(benchmark_dir)])
    assert len(files) == 3

    def keyed(records):
        return {
            (record["benchmark_file"], record["solver"], record["run"]): (record["cost"], record["seed"])
            for record in records
        }

    serial = run_benchmarks(files, FAST, tmp_path / "serial.csv", workers=1, stream=io.StringIO())
    stream = io.StringIO()
    parallel = run_benchmarks(files, FAST, tmp_path / "parallel.csv", workers=3, stream=stream)
    assert len(parallel) == len(serial) == 3 * FAST.runs * len(PROCEDURES)
    assert keyed(parallel) == keyed(serial)
    lines = stream.getvalue().splitlines()
    for path in files:
        assert sum(1 for line in lines if path.name in line) == 1
    with (tmp_path / "parallel.csv").open(newline="", encoding="utf-8") as handle:
        assert len(list(csv.DictReader(handle))) == len(parallel)


def test_parameter_sweep_configs():
    configs = sweep_configs("grasp", "alpha", ["0.0", "0.5"])
    assert [value for value, _ in configs] == [0.0, 0.5]
    assert [config.grasp.alpha for _, config in configs] == [0.0, 0.5]
    tenure = sweep_configs("tabu", "tenure", ["4"])
    assert tenure[0][1].tabu.tenure == 4
    with pytest.raises(ValueError):
        sweep_configs("grasp", "temperature", ["1"])


def test_parameter_sensitivity_writes_csv(benchmark_dir, tmp_path):
    output = tmp_path / "sweep.csv"
    results = run_experiment(benchmark_dir, output, "ils", "iterations", ["1", "3"], runs=2)
    assert len(results) == 2 * 2 * 2
    df = pd.read_csv(output)
    assert sorted(df["value"].unique()) == [1, 3]
    assert (df["parameter"] == "iterations").all()


def test_generated_dataset_parses_back(tmp_path):
    written = generate_dataset(tmp_path, [10, 20], ratio=4.0, k=3, count=2, seed=1)
    assert len(written) == 4
    cnf = parse_dimacs(written[-1])
    assert cnf.num_vars == 20
    assert len(cnf.clauses) == 80
    assert all(len(clause) == 3 for clause in cnf.clauses)
    assert all(len({abs(lit) for lit in clause}) == 3 for clause in cnf.clauses)


def test_random_kcnf_rejects_oversized_clauses():
    with pytest.raises(ValueError):
        random_kcnf(2, 5, 3, random.Random(0))
