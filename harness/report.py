from __future__ import annotations

import math
from typing import Dict, Iterable, List, Sequence

import pandas as pd

LABELS = {
    "constructive": "H",
    "local_search": "LS",
    "ils": "ILS",
    "tabu": "TS",
    "annealing": "SA",
    "grasp": "GRASP",
}

NAME_WIDTH = 35
CELL_WIDTH = 12


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_measure(mean: float, std: float) -> str:
    """Render ``mean(d)`` where ``d`` is the leading digit of the standard deviation.

    The mean is rounded to the decimal position of that digit, e.g.
    ``format_measure(12.345, 0.23) == "12.3(2)"``.
    """
    if not std or std <= 0 or math.isnan(std):
        return f"{mean:g}(0)"
    exponent = math.floor(math.log10(std))
    digit = _round_half_up(std / 10 ** exponent)
    if digit == 10:
        digit = 1
        exponent += 1
    if exponent < 0:
        text = f"{mean:.{-exponent}f}"
    else:
        factor = 10 ** exponent
        text = f"{_round_half_up(mean / factor) * factor:.0f}"
    return f"{text}({digit})"


def summarize(records: Iterable[Dict[str, object]]) -> pd.DataFrame:
    df = pd.DataFrame(list(records))
    if df.empty:
        return df
    summary = df.groupby(["benchmark_file", "solver"], sort=False).agg(
        cost_mean=("cost", "mean"),
        cost_std=("cost", "std"),
        time_mean=("elapsed_time", "mean"),
        time_std=("elapsed_time", "std"),
        runs=("run", "nunique"),
        verified=("verified", "all"),
    )
    return summary.fillna(0.0).reset_index()


def improvement(summary: pd.DataFrame, baseline: str = "constructive", target: str = "ils") -> float:
    means = summary.set_index("solver")["cost_mean"]
    if baseline not in means or target not in means:
        return 0.0
    if means[baseline] <= 0:
        return 0.0
    return (means[baseline] - means[target]) / means[baseline] * 100.0


def short_name(name: str) -> str:
    if len(name) > NAME_WIDTH - 2:
        return "..." + name[-(NAME_WIDTH - 5):]
    return name


def header(procedures: Sequence[str]) -> str:
    cells = [f"{'File':<{NAME_WIDTH}}"]
    for name in procedures:
        label = LABELS.get(name, name)
        cells.append(f"{'Cost ' + label:<{CELL_WIDTH}}")
        cells.append(f"{'T. ' + label + '(s)':<{CELL_WIDTH}}")
    cells.append("Gap H-ILS%")
    line = "| ".join(cells)
    rule = "-" * len(line)
    return f"{line}\n{rule}"


def format_row(name: str, records: List[Dict[str, object]], procedures: Sequence[str]) -> str:
    summary = summarize(records)
    cells = [f"{short_name(name):<{NAME_WIDTH}}"]
    by_solver = summary.set_index("solver") if not summary.empty else summary
    for procedure in procedures:
        if summary.empty or procedure not in by_solver.index:
            cells.extend([f"{'-':<{CELL_WIDTH}}"] * 2)
            continue
        row = by_solver.loc[procedure]
        cells.append(f"{format_measure(row['cost_mean'], row['cost_std']):<{CELL_WIDTH}}")
        cells.append(f"{format_measure(row['time_mean'], row['time_std']):<{CELL_WIDTH}}")
    gap = improvement(summary) if not summary.empty else 0.0
    cells.append(f"{gap:.2f}%")
    return "| ".join(cells)
