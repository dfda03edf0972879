"""ICP CLI — command-line interface for interval constraint propagation.

Commands:
  icp unfold EXPR [--target=LO,HI]                — Emit forward and reverse programs (JSON)
  icp contract EXPR --target=LO,HI --box x=LO,HI  — Contract a box against EXPR ∈ [LO, HI]

Bounds accept `inf` / `-inf`. Write negative bounds with `=`
(`--target=-1,1`) so they are not taken for options.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Optional

from icp import __version__
from icp.config import IcpConfig, load_config
from icp.contractor import build, fixpoint, is_inconsistent
from icp.errors import BuildError
from icp.interval import Interval
from icp.ir import programs_to_dict
from icp.parser import parse
from icp.pass1_unfold import unfold
from icp.pass2_propagate import propagate
from icp.verify import check_contraction, UNSOUND


def _interval_arg(text: str) -> Interval:
    parts = text.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected LO,HI, got '{text}'")
    try:
        lo, hi = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"bounds must be numbers, got '{text}'") from None
    return Interval(lo, hi)


def _box_arg(text: str) -> tuple[str, Interval]:
    name, sep, bounds = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=LO,HI, got '{text}'")
    return name.strip(), _interval_arg(bounds)


def _box_to_json(box: dict[str, Interval]) -> dict[str, Any]:
    return {name: iv.to_list() for name, iv in box.items()}


def _load(args: argparse.Namespace) -> IcpConfig:
    config = load_config(args.config)
    if getattr(args, "format", None):
        config.format = args.format
    return config


def cmd_unfold(args: argparse.Namespace) -> int:
    """Emit the forward program and its reverse program as JSON."""
    config = _load(args)
    try:
        if args.target is not None:
            contractor = build(args.expression, args.target,
                               registry=config.registry(), symbols=config.symbols())
            statements, reverse = contractor.forward.statements, contractor.reverse
            output = contractor.forward.output
        else:
            output, statements = unfold(parse(args.expression), config.symbols())
            reverse = propagate(statements, config.registry())
    except BuildError as e:
        print(e.to_json())
        return 1

    if config.format == "text":
        print("# forward")
        for s in statements:
            print(s)
        print("# reverse")
        for r in reverse:
            print(r)
        return 0

    data = programs_to_dict(statements, reverse)
    data["output"] = output
    print(json.dumps(data, indent=2))
    return 0


def cmd_contract(args: argparse.Namespace) -> int:
    """Contract a box against EXPR ∈ target."""
    config = _load(args)
    try:
        contractor = build(args.expression, args.target,
                           registry=config.registry(), symbols=config.symbols())
    except BuildError as e:
        print(e.to_json())
        return 1

    box = dict(args.box or [])
    report: dict[str, Any] = {
        "expression": args.expression,
        "target": args.target.to_list(),
        "input": _box_to_json(box),
    }

    if args.fixpoint:
        max_iterations = args.max_iterations or config.max_iterations
        result = fixpoint(contractor, box, max_iterations=max_iterations,
                          tolerance=config.tolerance)
        out = result.box
        report["iterations"] = result.iterations
        report["converged"] = result.converged
    else:
        out = contractor.apply(box)

    report["box"] = _box_to_json(out)
    report["inconsistent"] = is_inconsistent(out)

    code = 0
    if args.verify or config.verify:
        try:
            verification = check_contraction(contractor.expression, args.target, box, out,
                                             timeout_ms=config.verify_timeout_ms)
        except BuildError as e:
            print(e.to_json())
            return 1
        report["verification"] = verification.to_dict()
        if verification.status == UNSOUND:
            code = 2

    if config.format == "text":
        for name, iv in out.items():
            print(f"{name} ∈ {iv}")
        if report.get("verification"):
            print(f"verification: {report['verification']['status']}")
    else:
        print(json.dumps(report, indent=2))
    return code


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="icp",
        description="ICP — interval constraint propagation contractors",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log INFO (-v) or DEBUG (-vv)")
    parser.add_argument("--config", default=None, help="Config file (default: nearest .icprc.yml)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # unfold
    p_unfold = subparsers.add_parser("unfold", help="Emit forward/reverse programs")
    p_unfold.add_argument("expression", help="Arithmetic expression, e.g. 'x^2 + y^2'")
    p_unfold.add_argument("--target", type=_interval_arg, default=None, help="Inject EXPR ∈ [LO, HI]")
    p_unfold.add_argument("--format", choices=["json", "text"], default=None, help="Output format")
    p_unfold.set_defaults(func=cmd_unfold)

    # contract
    p_contract = subparsers.add_parser("contract", help="Contract a box")
    p_contract.add_argument("expression", help="Arithmetic expression, e.g. 'x^2 + y^2'")
    p_contract.add_argument("--target", type=_interval_arg, required=True, help="Target interval LO,HI")
    p_contract.add_argument("--box", type=_box_arg, action="append", help="Variable domain NAME=LO,HI (repeatable)")
    p_contract.add_argument("--fixpoint", action="store_true", help="Iterate until no bound moves")
    p_contract.add_argument("--max-iterations", type=int, default=0, dest="max_iterations",
                            help="Fixed-point iteration limit (default: from config)")
    p_contract.add_argument("--verify", action="store_true", help="Check the contraction with Z3")
    p_contract.add_argument("--format", choices=["json", "text"], default=None, help="Output format")
    p_contract.set_defaults(func=cmd_contract)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG if args.verbose > 1 else logging.INFO,
                            format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
