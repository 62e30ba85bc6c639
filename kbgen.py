#!/usr/bin/env python
"""Command-line entry point: evaluate a keyboard layout on a corpus, then optimize it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from corpus_loader import load_texts
from evaluator import LayoutEvaluator
from formatting import format_changes, format_evaluation, format_result
from freqdist import FreqDist
from layout import KeyboardLayout
from logger import OptimizerLogger
from optimizers.genetic import GeneticOptimizer
from settings import load_settings

logger = logging.getLogger("kbgen")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kbgen",
        description="Evaluate a keyboard layout on a corpus of text files, then search for a more ergonomic layout with a genetic algorithm.",
        epilog="Optimizer options override the [optimizer] table of the config file.",
    )
    parser.add_argument("corpus_dir", type=Path, help="Directory of text files, searched recursively.")
    parser.add_argument("layout_file", type=Path, help="JSON layout document to start from.")
    parser.add_argument("--config", type=Path, default=None, help="TOML settings file (default: config.toml next to this script, if present).")
    parser.add_argument("--population-size", type=int, default=None)
    parser.add_argument("--generations", dest="max_generations", type=int, default=None)
    parser.add_argument("--mutation-rate", type=float, default=None)
    parser.add_argument("--crossover-rate", type=float, default=None)
    parser.add_argument("--tournament-size", type=int, default=None)
    parser.add_argument("--stagnation-limit", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs.")
    parser.add_argument("--workers", type=int, default=None, help="Processes used to score each generation.")
    parser.add_argument("--no-accents", action="store_true", help="Count characters as they are, without dead key expansion.")
    parser.add_argument("--output", type=Path, default=None, help="Save the optimized layout to this JSON file.")
    parser.add_argument("--log-generations", action="store_true", help="Append per-generation scores to logs/genetic_generations.csv.")
    parser.add_argument("--no-progress", action="store_true", help="Hide progress bars.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config).with_optimizer(
            population_size=args.population_size,
            max_generations=args.max_generations,
            mutation_rate=args.mutation_rate,
            crossover_rate=args.crossover_rate,
            tournament_size=args.tournament_size,
            stagnation_limit=args.stagnation_limit,
            seed=args.seed,
            workers=args.workers,
        )
        layout = KeyboardLayout.from_file(args.layout_file)
        texts = load_texts(args.corpus_dir, settings.corpus.extensions, settings.corpus.encoding)
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    freqdist = FreqDist.from_texts(
        args.corpus_dir.name,
        texts,
        expand_accents=settings.corpus.expand_accents and not args.no_accents,
        lowercase=settings.corpus.lowercase,
        progress=not args.no_progress,
        keep=layout.chars,
    )
    evaluator = LayoutEvaluator(freqdist, settings.objective)

    initial = evaluator.evaluate(layout)
    print(format_evaluation(layout, initial, evaluator.objective))
    print()

    optimizer = GeneticOptimizer(
        evaluator,
        settings.optimizer,
        progress=not args.no_progress,
        run_logger=OptimizerLogger(
            GeneticOptimizer.name,
            f"{layout.name}_{args.corpus_dir.name}",
            log_generations=settings.log_generations or args.log_generations,
        ),
    )
    result = optimizer.optimize(layout)

    print(format_evaluation(result.best_layout, result.evaluation, evaluator.objective))
    print()
    print(format_changes(layout, result.best_layout))
    print()
    print(format_result(result, initial.score))

    if args.output is not None:
        try:
            result.best_layout.save(args.output, description=f"optimized from {layout.name} on {args.corpus_dir.name}")
        except OSError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        logger.info("saved %s", args.output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
