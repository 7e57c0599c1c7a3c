# visualize.py
import os
import matplotlib.pyplot as plt
import numpy as np

def _ensure_parent(outpath):
    parent = os.path.dirname(outpath)
    if parent:
        os.makedirs(parent, exist_ok=True)

def plot_outcome_breakdown(counters, outpath):
    _ensure_parent(outpath)
    # evictions are a subset of misses, so split misses into cold/conflict bars
    labels = ['Hit', 'Miss (fill)', 'Miss (eviction)']
    values = [counters.hits, counters.misses - counters.evictions, counters.evictions]
    plt.figure(figsize=(6,4))
    plt.bar(labels, values, color=['tab:green', 'tab:orange', 'tab:red'])
    plt.title(f"Cache Outcomes (hit rate {counters.hit_rate:.1%})")
    plt.ylabel("Accesses")
    plt.grid(True, axis='y')
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()

def plot_associativity_sweep(ways, hit_rates, outpath):
    _ensure_parent(outpath)
    ways = np.asarray(ways)
    rates = np.asarray(hit_rates, dtype=float) * 100.0
    plt.figure(figsize=(8,4))
    plt.plot(ways, rates, marker='o')
    plt.xscale('log', base=2)
    plt.xticks(ways, [str(w) for w in ways])
    plt.title("Hit Rate vs Associativity")
    plt.xlabel("Lines per set (E)")
    plt.ylabel("Hit rate (%)")
    plt.grid(True)
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
