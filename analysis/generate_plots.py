from __future__ import annotations
import argparse
from pathlib import Path
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

def ensure_output(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)

def line_plot(df: pd.DataFrame, metric: str, output: Path, ylabel: str) -> None:
    fig, ax = plt.subplots()
    for solver, group in df.groupby("solver"):
        series = group.groupby("num_vars")[metric].mean().sort_index()
        ax.plot(series.index, series.values, marker="o", label=solver)
    ax.set_xlabel("num_vars")
    ax.set_ylabel(ylabel)
    ax.legend()
    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)

def metric_bar(df: pd.DataFrame, metric: str, output: Path) -> None:
    fig, ax = plt.subplots()
    agg = df.groupby("solver")[metric].agg(["mean", "std"]).fillna(0.0).sort_values("mean", ascending=False)
    agg["mean"].plot(kind="bar", yerr=agg["std"], ax=ax, capsize=3)
    ax.set_ylabel(metric)
    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)

def per_file_plot(df: pd.DataFrame, output: Path) -> None:
    fig, ax = plt.subplots()
    pivot = df.pivot_table(values="cost", index="benchmark_file", columns="solver", aggfunc="mean")
    pivot.index = [Path(name).stem for name in pivot.index]
    pivot.plot(kind="bar", ax=ax)
    ax.set_xlabel("benchmark")
    ax.set_ylabel("mean unsatisfied clauses")
    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)

def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", required=True)
    parser.add_argument("--output", default="results/plots")
    args = parser.parse_args()
    df = pd.read_csv(args.input)
    output_dir = Path(args.output)
    ensure_output(output_dir)
    line_plot(df, "cost", output_dir / "cost_vs_vars.png", "mean unsatisfied clauses")
    line_plot(df, "elapsed_time", output_dir / "time_vs_vars.png", "elapsed_time (s)")
    metric_bar(df, "cost", output_dir / "cost_by_solver.png")
    metric_bar(df, "elapsed_time", output_dir / "time_by_solver.png")
    per_file_plot(df, output_dir / "cost_by_file.png")

    df_search = df[df["solver"] != "constructive"]
    if not df_search.empty:
        metric_bar(df_search, "flips", output_dir / "flips_comparison.png")

if __name__ == "__main__":
    main()
