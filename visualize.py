# visualize.py
import os
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt


def _ensure_dir(outpath):
    dirname = os.path.dirname(outpath)
    if dirname:
        os.makedirs(dirname, exist_ok=True)


def plot_hit_miss_rate(stats, outpath):
    _ensure_dir(outpath)
    plt.figure(figsize=(4,4))
    if stats.accesses:
        labels = ['Hit', 'Miss']
        sizes = [stats.hits, stats.misses]
        plt.pie(sizes, labels=labels, autopct='%1.1f%%')
    else:
        plt.text(0.5, 0.5, "no accesses", ha="center", va="center")
        plt.axis("off")
    plt.title(f"Cache Hit/Miss Rate ({stats.evictions} evictions)")
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()


def plot_sweep(results, outpath):
    """Bar chart of miss rate for each swept cache geometry."""
    _ensure_dir(outpath)
    labels = [f"s={r['s']} E={r['E']} b={r['b']}" for r in results]
    miss_rates = [r["miss_rate"] for r in results]
    plt.figure(figsize=(max(6, len(results) * 1.2), 4))
    plt.bar(range(len(results)), miss_rates)
    plt.xticks(range(len(results)), labels, rotation=30, ha="right")
    plt.ylim(0, 1)
    plt.title("Miss Rate by Cache Geometry")
    plt.ylabel("Miss rate")
    plt.grid(True, axis="y")
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
