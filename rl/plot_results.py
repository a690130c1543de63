"""
Plot training metrics written by MetricsCallback.
Learning curves per algorithm, a side-by-side comparison and a text summary.
"""

import os
import argparse
from typing import Dict, Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

COLORS = {"dqn": "#2ecc71", "ppo": "#3498db"}


def load_metrics(log_dir: str, algo: str) -> Optional[pd.DataFrame]:
    """Load <algo>_metrics.csv from log_dir/<algo>/ or log_dir/"""
    for csv_path in (os.path.join(log_dir, algo, f"{algo}_metrics.csv"),
                     os.path.join(log_dir, f"{algo}_metrics.csv")):
        if os.path.exists(csv_path):
            return pd.read_csv(csv_path)
    return None


def smooth(data: np.ndarray, window: int = 10) -> np.ndarray:
    """Rolling mean; short series are returned as-is."""
    if len(data) < window:
        return data
    kernel = np.ones(window) / window
    return np.convolve(data, kernel, mode="valid")


def _plot_smoothed(ax, df: pd.DataFrame, column: str, window: int, **kwargs):
    values = smooth(df[column].values.astype(float), window)
    ax.plot(df["timestep"].values[:len(values)], values, linewidth=2, **kwargs)


def plot_learning_curve(df: pd.DataFrame, algo: str, output_dir: str, window: int = 50):
    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(f"{algo.upper()} Learning Curves", fontsize=16, fontweight="bold")

    panels = [
        (axes[0, 0], "reward", "Episode Reward", None),
        (axes[0, 1], "score", "Final Score", "orange"),
        (axes[1, 0], "won", "Win Rate", "green"),
        (axes[1, 1], "damage", "Damage Taken", "red"),
    ]
    for ax, column, label, color in panels:
        if column not in df.columns:
            ax.axis("off")
            continue
        _plot_smoothed(ax, df, column, window, color=color)
        ax.set_xlabel("Timesteps")
        ax.set_ylabel(label)
        ax.set_title(f"{label} vs Timesteps")
        ax.grid(True, alpha=0.3)
    axes[1, 0].set_ylim(0, 1.05)

    plt.tight_layout()

    os.makedirs(output_dir, exist_ok=True)
    save_path = os.path.join(output_dir, f"{algo}_learning_curve.png")
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()

    print(f"Saved {algo} learning curve to {save_path}")
    return save_path


def plot_comparison(data: Dict[str, pd.DataFrame], output_dir: str, window: int = 50):
    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    fig.suptitle("Algorithm Comparison", fontsize=16, fontweight="bold")

    for ax, column, label in zip(axes, ("reward", "score", "won"),
                                 ("Episode Reward", "Final Score", "Win Rate")):
        for algo, df in data.items():
            _plot_smoothed(ax, df, column, window, label=algo.upper(), color=COLORS.get(algo))
        ax.set_xlabel("Timesteps")
        ax.set_ylabel(label)
        ax.legend()
        ax.grid(True, alpha=0.3)

    plt.tight_layout()

    os.makedirs(output_dir, exist_ok=True)
    save_path = os.path.join(output_dir, "algorithm_comparison.png")
    plt.savefig(save_path, dpi=150, bbox_inches="tight")
    plt.close()

    print(f"Saved comparison plot to {save_path}")
    return save_path


def generate_summary_report(data: Dict[str, pd.DataFrame], output_dir: str):
    lines = [
        "=" * 60,
        "HIGHWAY TRAINING SUMMARY",
        "=" * 60,
    ]

    for algo, df in data.items():
        final = df.tail(100)
        lines.append(f"\n{algo.upper()} Results:")
        lines.append("-" * 40)
        lines.append(f"  Total Episodes: {len(df)}")
        lines.append(f"  Total Timesteps: {df['timestep'].max():,}")
        lines.append(f"  Mean Reward: {df['reward'].mean():.2f} ± {df['reward'].std():.2f}")
        lines.append("\n  Final Performance (last 100 episodes):")
        lines.append(f"    Mean Reward: {final['reward'].mean():.2f} ± {final['reward'].std():.2f}")
        lines.append(f"    Mean Score: {final['score'].mean():.1f}")
        lines.append(f"    Mean Coins: {final['coins'].mean():.1f}")
        lines.append(f"    Win Rate: {final['won'].mean():.2%}")

    lines.append("\n" + "=" * 60)

    report = "\n".join(lines)
    print(report)

    os.makedirs(output_dir, exist_ok=True)
    report_path = os.path.join(output_dir, "experiment_summary.txt")
    with open(report_path, "w") as f:
        f.write(report)

    print(f"\nSaved summary report to {report_path}")
    return report_path


def main():
    parser = argparse.ArgumentParser(description="Plot highway training results")
    parser.add_argument(
        "--log-dir",
        type=str,
        default="./logs",
        help="Directory containing metrics CSV files",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="./plots",
        help="Directory to save plots",
    )
    parser.add_argument(
        "--window",
        type=int,
        default=50,
        help="Smoothing window size (default: 50)",
    )
    parser.add_argument(
        "--algos",
        nargs="+",
        default=["dqn", "ppo"],
        help="Algorithms to plot",
    )

    args = parser.parse_args()

    print(f"Loading metrics from {args.log_dir}...")

    data = {}
    for algo in args.algos:
        df = load_metrics(args.log_dir, algo)
        if df is None or df.empty:
            print(f"  No data found for {algo}")
            continue
        print(f"  Loaded {algo}: {len(df)} episodes")
        data[algo] = df

    if not data:
        print("\nNo data found! Make sure training has generated metrics files.")
        return

    for algo, df in data.items():
        plot_learning_curve(df, algo, args.output_dir, args.window)

    if len(data) > 1:
        plot_comparison(data, args.output_dir, args.window)

    generate_summary_report(data, args.output_dir)

    print(f"\nAll plots saved to {args.output_dir}/")


if __name__ == "__main__":
    main()
