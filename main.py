#!/usr/bin/env python3
"""
Command-line runner for estimate programs.
"""

# Pipeline overview:
# 1) Read a program file and evaluate it statement by statement; a failing
#    statement is logged and the rest of the program still runs.
# 2) Log every statement's value as "mean [p5, p95] unit".
# 3) Optionally export a summary table of all session variables to CSV and
#    histogram/dotplot figures of every uncertain variable.

import argparse
import logging
import os
import sys
import time

from neofermi import Evaluator, Settings, save_summary_csv, summarize
from neofermi.errors import ParseError


def configure_logging(log_path=None, level=logging.INFO):
    """Log to stdout and, when ``log_path`` is given, to that file."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_path:
        handlers.append(logging.FileHandler(log_path, mode="w"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser():
    parser = argparse.ArgumentParser(description="Evaluate a Fermi estimation program.")
    parser.add_argument("file", help="Program file to evaluate")
    parser.add_argument("--samples", type=int, default=None, help="Particles per distribution")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible sampling")
    parser.add_argument("--confidence", type=float, default=None, help="Mass inside 'a to b' ranges")
    parser.add_argument("--csv", default=None, help="Write a summary table of all variables to this path")
    parser.add_argument("--figures", default=None, help="Write histogram and dotplot figures to this folder")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")
    return parser


def save_figures(variables, folder):
    """Write a histogram and a dotplot per uncertain variable; return the count."""
    import matplotlib.pyplot as plt

    from neofermi.plotting import plot_dotplot, plot_histogram, save_figure
    from neofermi.plotting.style import sanitize_filename

    written = 0
    for name, quantity in variables.items():
        if quantity.is_scalar():
            continue
        stem = sanitize_filename(name)
        for kind, plot in (("histogram", plot_histogram), ("dotplot", plot_dotplot)):
            fig = plot(quantity, title=name)
            save_figure(fig, os.path.join(folder, f"{stem}_{kind}"), formats=("png",))
            plt.close(fig)
            written += 1
    return written


def main(argv=None):
    """Run one program file and return a process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = Settings().with_overrides(
            sample_count=args.samples, seed=args.seed, confidence=args.confidence
        )
    except ValueError as exc:
        logging.error("Invalid settings: %s", exc)
        return 2

    try:
        with open(args.file, encoding="utf-8") as fh:
            source = fh.read()
    except OSError as exc:
        logging.error("Cannot read %s: %s", args.file, exc)
        return 2

    start_time = time.time()
    evaluator = Evaluator(settings)
    logging.info("Evaluating %s with %d samples per distribution", args.file, settings.sample_count)
    try:
        results = evaluator.run(source)
    except ParseError as exc:
        logging.error("Parse error in %s: %s", args.file, exc)
        return 1

    for result in results:
        if result.ok and result.value is not None:
            label = result.name or f"[{result.index + 1}]"
            logging.info("%s = %s", label, result.value)
    failures = sum(1 for r in results if not r.ok)
    logging.info(
        "Evaluated %d statement(s) in %.2f seconds (%d failed)",
        len(results),
        time.time() - start_time,
        failures,
    )

    variables = {name: evaluator.get_variable(name) for name in evaluator.user_variable_names()}
    if args.csv:
        save_summary_csv(summarize(variables), args.csv)
    if args.figures:
        count = save_figures(variables, args.figures)
        logging.info("Saved %d figure(s) to %s", count, args.figures)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
