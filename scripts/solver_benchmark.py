import sys
import os
import json
import argparse
import logging

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pathfinder_lab.algo.compare import benchmark

logger = logging.getLogger("pathfinder_lab.benchmark")


def run_benchmark():
    parser = argparse.ArgumentParser(description="Dijkstra vs A* Benchmark")
    parser.add_argument("--sizes", type=int, nargs="+", default=[5, 10, 20, 30], help="Square grid sizes")
    parser.add_argument("--runs", type=int, default=25, help="Mazes per size")
    parser.add_argument("--weighted", action="store_true", help="Random weights on every open cell")
    parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    parser.add_argument("--json", type=str, help="Write aggregated stats to this file")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                        datefmt='%H:%M:%S')

    print("=== PATHFINDER BENCHMARK ===")
    print(f"Sizes: {args.sizes} | Runs: {args.runs} | Weighted: {args.weighted}")
    print("-" * 50)

    report = benchmark(args.sizes, args.runs, seed=args.seed, weighted=args.weighted)
    stats = report.stats()

    print(f"{'ALGORITHM':<10} | {'EXPLORED':<10} | {'MEDIAN':<8} | {'PATH':<8} | {'MS':<8}")
    for name, s in stats.items():
        print(f"{name:<10} | {s['explored_mean']:<10.1f} | {s['explored_median']:<8.1f} | "
              f"{s['path_mean']:<8.1f} | {s['ms_mean']:<8.3f}")
    print("-" * 50)
    print(f"A*/Dijkstra explored ratio: {report.explored_ratio():.3f}")
    print(f"Cost mismatches: {report.mismatches} | Unsolved: {report.unsolved}")

    if args.json:
        payload = {
            "sizes": report.sizes,
            "runs": report.runs,
            "stats": stats,
            "explored_ratio": report.explored_ratio(),
            "mismatches": report.mismatches,
            "unsolved": report.unsolved,
        }
        with open(args.json, "w") as f:
            json.dump(payload, f, indent=2)
        logger.info(f"Results saved to {args.json}")


if __name__ == "__main__":
    run_benchmark()
