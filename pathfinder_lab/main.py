import argparse
import sys
import os
import logging

# Ensure project root is in path so we can import 'pathfinder_lab' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pathfinder_lab.core.config import ALGORITHMS, DEFAULT_COLS, DEFAULT_ROWS, RECOMMENDED_MAX_SIZE
from pathfinder_lab.core.errors import PathfinderError


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pathfinder Lab: Dijkstra vs A* on weighted grids")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate Command
    gen_parser = subparsers.add_parser("generate", help="Generate a new maze")
    gen_parser.add_argument("--rows", type=int, default=DEFAULT_ROWS, help="Grid rows")
    gen_parser.add_argument("--cols", type=int, default=DEFAULT_COLS, help="Grid columns")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    gen_parser.add_argument("--weights", type=float, default=0.0,
                            help="Fill probability for random weights (0.0 - 1.0)")
    gen_parser.add_argument("--random-points", action="store_true", help="Randomize Start and End")
    gen_parser.add_argument("--detour", type=float, default=0.5, help="Detour chance of the repair corridor")
    gen_parser.add_argument("--out", type=str, help="Output file path (optional)")
    gen_parser.add_argument("--compress", action="store_true", help="zlib-compress the saved grid")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", help="Solve a saved grid")
    solve_parser.add_argument("input_file", help="Path to grid file")
    solve_parser.add_argument("--algo", type=str, default="astar", choices=ALGORITHMS, help="Search algorithm")
    solve_parser.add_argument("--heuristic", type=str, default="manhattan",
                              choices=["manhattan", "euclidean", "chebyshev", "zero"], help="A* heuristic")
    solve_parser.add_argument("--record-events", type=str, help="Save search events to binary file")

    # Compare Command
    cmp_parser = subparsers.add_parser("compare", help="Run both algorithms on the same grid")
    cmp_parser.add_argument("input_file", nargs="?", help="Path to grid file (random maze if omitted)")
    cmp_parser.add_argument("--rows", type=int, default=DEFAULT_ROWS, help="Grid rows")
    cmp_parser.add_argument("--cols", type=int, default=DEFAULT_COLS, help="Grid columns")
    cmp_parser.add_argument("--seed", type=int, default=None, help="Random Seed")

    # Benchmark Command
    bench_parser = subparsers.add_parser("benchmark", help="Compare both algorithms over many random mazes")
    bench_parser.add_argument("--sizes", type=int, nargs="+", default=[10, 20, 30], help="Square grid sizes")
    bench_parser.add_argument("--runs", type=int, default=10, help="Mazes per size")
    bench_parser.add_argument("--seed", type=int, default=None, help="Random Seed")
    bench_parser.add_argument("--weighted", action="store_true", help="Add random weights to every maze")
    return parser


def cmd_generate(args, logger) -> int:
    from pathfinder_lab.algo.division import RecursiveDivision, ensure_path
    from pathfinder_lab.algo.randomize import randomize_start_end, randomize_weights
    from pathfinder_lab.core.config import GeneratorConfig
    from pathfinder_lab.core.grid import Grid

    if max(args.rows, args.cols) > RECOMMENDED_MAX_SIZE:
        logger.warning(f"Grids above {RECOMMENDED_MAX_SIZE}x{RECOMMENDED_MAX_SIZE} get slow to explore")

    config = GeneratorConfig(detour_chance=args.detour, fill_probability=args.weights)
    logger.info(f"Generating {args.rows}x{args.cols} maze (recursive division)...")
    grid = Grid(args.rows, args.cols)
    generator = RecursiveDivision(grid, seed=args.seed, config=config)
    for status in generator.run():
        logger.debug(status)

    if args.random_points:
        start, end = randomize_start_end(grid, generator.rng, config.max_attempts)
        ensure_path(grid, generator.rng, config.detour_chance)
        logger.info(f"Start={start}, End={end}")
    if args.weights > 0:
        heavy = randomize_weights(grid, generator.rng, config.fill_probability, config.weight_choices)
        logger.info(f"Weighted {heavy} cells.")

    logger.info(f"Walls: {grid.wall_count()} / {len(grid)}")
    if args.out:
        from pathfinder_lab.io.serializer import GridSerializer
        meta = {"algo": "division", "seed": args.seed, "config": config.as_dict()}
        GridSerializer.save(grid, args.out, meta=meta, compress=args.compress)
    print("Done.")
    return 0


def cmd_solve(args, logger) -> int:
    from pathfinder_lab.algo.solvers import get_solver
    from pathfinder_lab.core.events import SearchEventWriter
    from pathfinder_lab.io.serializer import GridSerializer

    grid, meta = GridSerializer.load(args.input_file)
    logger.info(f"Loaded {grid.rows}x{grid.cols} grid. Meta: {meta}")

    evt_writer = None
    if args.record_events:
        evt_writer = SearchEventWriter(args.record_events)
        evt_writer.write_header(grid.rows, grid.cols)
        logger.info(f"Recording events to {args.record_events}...")

    kwargs = {"event_writer": evt_writer}
    if args.algo == "astar":
        kwargs["heuristic"] = args.heuristic
    try:
        solver = get_solver(args.algo, grid, **kwargs)
        logger.info(f"Solving with {solver.info['name']} from {grid.start.position} to {grid.end.position}...")
        count = 0
        for _ in solver.run():
            count += 1
            if count % 100 == 0:
                print(f"\rExplored: {solver.nodes_explored}", end="")
    finally:
        if evt_writer:
            evt_writer.close()

    result = solver.result
    if result.success:
        print(f"\nDone. Path Length: {result.path_length} (cost {result.path_cost}), "
              f"Explored: {result.nodes_explored}")
    else:
        print(f"\n{result.message}. Explored: {result.nodes_explored}")
    return 0 if result.success else 1


def cmd_compare(args, logger) -> int:
    from pathfinder_lab.algo.compare import compare
    from pathfinder_lab.algo.division import RecursiveDivision
    from pathfinder_lab.core.grid import Grid
    from pathfinder_lab.io.serializer import GridSerializer

    if args.input_file:
        grid, _ = GridSerializer.load(args.input_file)
    else:
        grid = Grid(args.rows, args.cols)
        RecursiveDivision(grid, seed=args.seed).run_all()

    comparison = compare(grid)
    print(f"\n{'ALGORITHM':<10} | {'EXPLORED':<10} | {'PATH LEN':<10} | {'COST':<8} | {'TIME (ms)':<10}")
    print("-" * 60)
    for name, res, secs in (("Dijkstra", comparison.dijkstra, comparison.dijkstra_seconds),
                            ("A*", comparison.astar, comparison.astar_seconds)):
        print(f"{name:<10} | {res.nodes_explored:<10} | {res.path_length:<10} | "
              f"{res.path_cost:<8} | {secs * 1000:<10.3f}")
    print()
    print(comparison.summary())
    return 0


def cmd_benchmark(args, logger) -> int:
    from pathfinder_lab.algo.compare import benchmark

    logger.info(f"Running benchmark: sizes={args.sizes}, runs={args.runs}")
    report = benchmark(args.sizes, args.runs, seed=args.seed, weighted=args.weighted)
    print(f"\n{'ALGORITHM':<10} | {'EXPLORED (mean)':<16} | {'MEDIAN':<8} | {'MAX':<6} | {'PATH (mean)':<12} | {'MS (mean)':<10}")
    print("-" * 80)
    for name, s in report.stats().items():
        print(f"{name:<10} | {s['explored_mean']:<16.1f} | {s['explored_median']:<8.1f} | "
              f"{s['explored_max']:<6} | {s['path_mean']:<12.1f} | {s['ms_mean']:<10.3f}")
    print(f"\nA*/Dijkstra explored ratio: {report.explored_ratio():.3f}")
    print(f"Cost mismatches: {report.mismatches}, unsolved: {report.unsolved}")
    return 0 if report.mismatches == 0 else 1


COMMANDS = {
    "generate": cmd_generate,
    "solve": cmd_solve,
    "compare": cmd_compare,
    "benchmark": cmd_benchmark,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger("pathfinder_lab")

    if args.command is None:
        parser.print_help()
        return 0

    logger.info(f"Running command: {args.command}")
    try:
        return COMMANDS[args.command](args, logger)
    except (PathfinderError, ValueError, OSError) as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
