# main.py
import argparse
import copy
import json
import os
import sys

from cache import ConfigurationError
from simulator import SimulationRunner
from tracefile import TraceFormatError
from visualize import plot_associativity_sweep, plot_outcome_breakdown

DEFAULT_CONFIG = {
    "cache": {"set_bits": 4, "lines_per_set": 1, "block_bits": 4},
    "trace": {"path": None, "verbose": False},
    "workload": {
        "num_requests": 10000,
        "address_space_kb": 1024,
        "access_pattern": "mixed",
        "read_ratio": 0.7,
        "modify_ratio": 0.1,
        "access_size": 8,
        "random_seed": 42,
    },
    "sweep": {"lines_per_set": [1, 2, 4, 8]},
    "output": {
        "results_dir": "results",
        "results_file": "results.json",
        "breakdown_plot": "results/breakdown.png",
        "sweep_plot": "results/sweep.png",
    },
}

def load_config(path="config.json"):
    """Read a JSON config and layer it over the defaults, section by section."""
    with open(path, "r") as f:
        user_cfg = json.load(f)
    if not isinstance(user_cfg, dict):
        raise ConfigurationError(f"{path}: top level must be a JSON object")
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in user_cfg.items():
        if not isinstance(values, dict):
            raise ConfigurationError(f"{path}: section {section!r} must be a JSON object")
        cfg.setdefault(section, {}).update(values)
    return cfg

def build_parser():
    parser = argparse.ArgumentParser(
        description="Set-associative LRU cache simulator for memory traces.")
    parser.add_argument("-s", type=int, dest="set_bits",
                        help="number of set index bits (S = 2^s sets)")
    parser.add_argument("-E", type=int, dest="lines_per_set",
                        help="associativity (number of lines per set)")
    parser.add_argument("-b", type=int, dest="block_bits",
                        help="number of block bits (B = 2^b block size)")
    parser.add_argument("-t", dest="trace", metavar="TRACEFILE",
                        help="valgrind trace to replay; a synthetic workload is used if omitted")
    parser.add_argument("-v", action="store_true", dest="verbose",
                        help="print the outcome of every access")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--sweep", action="store_true",
                        help="also replay the trace across the configured associativities")
    parser.add_argument("--plot-dir", help="write PNG charts into this directory")
    parser.add_argument("--results", action="store_true",
                        help="save the summary as JSON in the results directory")
    return parser

def apply_overrides(cfg, args):
    cache_cfg = cfg.setdefault("cache", {})
    for key in ("set_bits", "lines_per_set", "block_bits"):
        value = getattr(args, key)
        if value is not None:
            cache_cfg[key] = value
    trace_cfg = cfg.setdefault("trace", {})
    if args.trace is not None:
        trace_cfg["path"] = args.trace
    if args.verbose:
        trace_cfg["verbose"] = True
    if args.plot_dir is not None:
        out_cfg = cfg.setdefault("output", {})
        out_cfg["breakdown_plot"] = os.path.join(args.plot_dir, "breakdown.png")
        out_cfg["sweep_plot"] = os.path.join(args.plot_dir, "sweep.png")
    return cfg

def print_summary(hits, misses, evictions):
    print(f"hits:{hits} misses:{misses} evictions:{evictions}")

def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config) if args.config else copy.deepcopy(DEFAULT_CONFIG)
        cfg = apply_overrides(cfg, args)
        runner = SimulationRunner(cfg)
        summary, counters = runner.run()
        print_summary(counters.hits, counters.misses, counters.evictions)

        out_cfg = cfg.get("output", {})
        sweep = None
        if args.sweep:
            sweep = runner.sweep()
            for row in sweep:
                print(f"E={row['lines_per_set']}: hit_rate={row['hit_rate']:.4f} "
                      f"hits:{row['hits']} misses:{row['misses']} evictions:{row['evictions']}")
        if args.results:
            payload = dict(summary)
            if sweep is not None:
                payload["sweep"] = sweep
            print("Results saved to:", runner.save_results(payload, out_cfg))
        if args.plot_dir:
            plot_outcome_breakdown(counters, out_cfg["breakdown_plot"])
            if sweep is not None:
                plot_associativity_sweep([r["lines_per_set"] for r in sweep],
                                         [r["hit_rate"] for r in sweep],
                                         out_cfg["sweep_plot"])
            print("Plots saved in", args.plot_dir)
    except (ConfigurationError, TraceFormatError, OSError, json.JSONDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
