"""
Main entry point for the fuzzy rule engine.

This script loads an engine from a TOML configuration file, sets the crisp
input values given on the command line, runs one evaluation cycle and prints
the crisp output values. Optionally it traces the rule blocks and plots the
input membership functions.

    python main.py --config config/engine_config.toml \
        --input service=7.5 --input food=8.0 --trace
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from fuzzyrules import op
from fuzzyrules.config import load_engine
from fuzzyrules.errors import FuzzyError
from utils.logger import setup_logging
from utils.rule_trace import trace_rule_block


def parse_inputs(pairs: List[str]) -> Dict[str, float]:
    """
    Parses "name=value" pairs.

    Raises:
        ValueError: If a pair has no "=" or its value is not a number.
    """
    inputs = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"expected name=value, found <{pair}>")
        inputs[name.strip()] = op.to_float(value.strip())
    return inputs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evaluate a fuzzy rule engine once.")
    parser.add_argument(
        "--config",
        default="config/engine_config.toml",
        help="Engine configuration file (TOML).",
    )
    parser.add_argument(
        "--input",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Crisp value of an input variable; may be repeated.",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the activation degree of every rule after the cycle.",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Plot the rule degrees and the input membership functions.",
    )
    parser.add_argument("--log-dir", default="logs", help="Directory of the log files.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Initialize logging
    setup_logging(log_dir=args.log_dir)
    main_log = logging.getLogger("main")
    main_log.info("Application starting...")

    try:
        inputs = parse_inputs(args.input)
        engine = load_engine(args.config)
        main_log.info("Configuration file '%s' loaded.", args.config)

        for name, value in inputs.items():
            engine.set_input_value(name, value)

        outputs = engine.process()
    except (FuzzyError, KeyError, ValueError, OSError) as e:
        main_log.critical("Engine could not be evaluated: %s", e)
        return 1

    for name, value in outputs.items():
        print(f"{name} = {op.fmt(value)}")
        main_log.info("Output %s = %s", name, op.fmt(value))

    if args.trace or args.plot:
        for block in engine.rule_blocks:
            for t in trace_rule_block(block, plot=args.plot):
                mark = "*" if t["triggered"] else " "
                print(f"{mark} {op.fmt(t['degree']):>6}  {t['rule']}")

    if args.plot:
        from utils.plot_membership_shapes import plot_membership_functions

        for variable in engine.input_variables:
            plot_membership_functions(variable, value=variable.value)

    main_log.info("Application finished.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
