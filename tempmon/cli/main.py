# tempmon/cli/main.py
from __future__ import annotations

import logging
from typing import Optional

from tempmon.core.errors import TempMonError

from tempmon.app.config_cell import ConfigStore
from tempmon.cli.args import parse_args
from tempmon.cli.commands import (
    cmd_config_set,
    cmd_config_show,
    cmd_decode,
    cmd_history,
    cmd_run,
)
from tempmon.common.logging_setup import configure_console_logging


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args = parse_args(argv)
        configure_console_logging(logging.DEBUG if args.verbose else logging.WARNING)

        if args.cmd == "decode":
            return cmd_decode(args.payload, company_id=args.company_id)

        store = ConfigStore(args.config)

        if args.cmd == "run":
            return cmd_run(store, secs=args.secs)
        if args.cmd == "history":
            return cmd_history(store, day=args.date, show_all=args.all)
        if args.cmd == "config":
            if args.config_cmd == "show":
                return cmd_config_show(store)
            return cmd_config_set(store, args.updates)

        return 2
    except TempMonError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
