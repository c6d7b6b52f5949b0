from __future__ import annotations
import argparse
from pathlib import Path
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd

def cost_vs_parameter(summary_csv: Path, output_png: Path) -> None:
    df = pd.read_csv(summary_csv)
    grouped = df.groupby('value')['cost'].agg(['mean', 'std']).fillna(0.0)
    solver = df['solver'].iloc[0]
    parameter = df['parameter'].iloc[0]
    fig, ax = plt.subplots()
    ax.errorbar(grouped.index, grouped['mean'], yerr=grouped['std'], marker='o', capsize=3)
    ax.set_xlabel(f'{solver} {parameter}')
    ax.set_ylabel('Mean unsatisfied clauses')
    fig.tight_layout()
    output_png.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_png)
    plt.close(fig)

def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument('--summary', required=True, help='Path to parameter_sensitivity.csv')
    parser.add_argument('--output', default='results/parameter_sweep/cost_vs_parameter.png')
    args = parser.parse_args()
    cost_vs_parameter(Path(args.summary), Path(args.output))

if __name__ == '__main__':
    main()
