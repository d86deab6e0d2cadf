# tempmon/cli/args.py
from __future__ import annotations

import argparse
from datetime import date, datetime
from typing import Dict, List, Optional

from tempmon.app.config import CONFIG_FILE


def _parse_date(v: str) -> date:
    try:
        return datetime.strptime(v, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{v}' (use YYYY-MM-DD)") from None


def _parse_int(v: str) -> int:
    # accepts 0x-prefixed company ids
    try:
        return int(v, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{v}'") from None


def parse_assignments(items: List[str]) -> Dict[str, str]:
    """['a=1', 'b=x'] -> {'a': '1', 'b': 'x'}"""
    out: Dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{item}'")
        out[key.strip()] = value.strip()
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tempmon")
    parser.add_argument("--config", default=CONFIG_FILE, help=f"Config file (default: {CONFIG_FILE}).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Scan, debounce, log and print readings.")
    p_run.add_argument("--secs", type=float, default=None, help="Stop after N seconds (default: run forever).")

    p_hist = sub.add_parser("history", help="Print readings from a daily log.")
    p_hist.add_argument("--date", type=_parse_date, default=None, help="Day to show (default: today).")
    p_hist.add_argument("--all", action="store_true", help="Ignore the history limit.")

    p_dec = sub.add_parser("decode", help="Decode a manufacturer payload offline.")
    p_dec.add_argument("payload", help="Payload bytes as hex, e.g. '01 2F'.")
    p_dec.add_argument("--company-id", type=_parse_int, default=0, help="Company identifier (e.g. 0xE100).")

    p_cfg = sub.add_parser("config", help="Show or change the configuration.")
    cfg_sub = p_cfg.add_subparsers(dest="config_cmd", required=True)
    cfg_sub.add_parser("show")
    p_set = cfg_sub.add_parser("set")
    p_set.add_argument("assignments", nargs="+", metavar="KEY=VALUE")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd == "config" and args.config_cmd == "set":
        try:
            args.updates = parse_assignments(args.assignments)
        except argparse.ArgumentTypeError as e:
            parser.error(str(e))
    return args
