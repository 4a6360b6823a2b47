from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence, TextIO, Union

from .config import CONFIG_TEMPLATE, ConfigError, load_config
from .runner import InventorySourceRunner
from .types import CliOptions, InventorySourceError

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "WARNING"
CONSOLE_SCRIPT = "ans-git-inv"

ANSIBLE_USAGE = """\
Usage with Ansible:
  1. Check your ansible.cfg file: script statement should present in enable_plugins option.
  2. Place app and it's config (named the same as app file but with .yaml) somewhere and remember path.
  3. Use next command to check that all works:
    ansible -i /some/folder/{prog} lovely_host -m ping
  4. Use ansible as you always do:
    ansible-playbook -i /some/folder/{prog} --diff plays/lovely_play.yml -l lovely_host
"""


class Ansi:
    RED = "\033[91m"
    RESET = "\033[0m"


def colorize(text: str, color: Optional[str], stream: Optional[TextIO] = None) -> str:
    if not color:
        return text
    stream = stream or sys.stderr
    if not stream.isatty() or os.environ.get("NO_COLOR"):
        return text
    return f"{color}{text}{Ansi.RESET}"


class ArgumentError(InventorySourceError):
    """Raised for malformed command line flags."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:  # type: ignore[override]
        raise ArgumentError(message)


def build_parser(executable: Union[str, Path]) -> argparse.ArgumentParser:
    executable = Path(executable)
    prog = executable.name
    parser = _Parser(
        prog=prog,
        description="Ansible dynamic inventory read from a git repository over SSH.",
        epilog=ANSIBLE_USAGE.format(prog=prog),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="CONFIG_FILE",
        help=(
            "Path to the config file (default: the executable path with .yaml appended, "
            f"here {executable}.yaml)"
        ),
    )
    parser.add_argument("--host", metavar="HOST", help="Output specific host info.")
    parser.add_argument("--list", dest="list_all", action="store_true", help="Output all hosts info (default).")
    parser.add_argument(
        "-g",
        "--generate-config",
        action="store_true",
        help="Generate example of config file to stdout.",
    )
    parser.add_argument("-h", "--help", dest="show_help", action="store_true", help="Show help.")
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        help=f"Python logging level (default: {DEFAULT_LOG_LEVEL})",
    )
    return parser


def parse_args(argv: Sequence[str], executable: Union[str, Path]) -> CliOptions:
    """Parse ``argv`` once into immutable options.

    Unknown tokens are kept aside rather than rejected so that Ansible can pass
    flags this inventory does not care about.
    """

    executable = Path(executable).absolute()
    parser = build_parser(executable)
    args, ignored = parser.parse_known_args(list(argv))

    for flag, value in (("--config", args.config), ("--host", args.host)):
        if value is None:
            continue
        if not value:
            raise ArgumentError(f"invalid key-value format, expected: {flag}=value")
        if value.startswith("-"):
            raise ArgumentError(f"missing value for {flag}, got flag {value}")

    config_file = Path(args.config) if args.config else Path(f"{executable}.yaml")
    return CliOptions(
        config_file=config_file,
        host=args.host or "",
        list_all=args.list_all,
        generate_config=args.generate_config,
        show_help=args.show_help,
        log_level=args.log_level,
        ignored=tuple(ignored),
    )


def default_executable(argv0: str) -> Path:
    """Path the default config is derived from.

    Under ``python -m ans_git_inventory`` argv[0] is the package's ``__main__.py``,
    so the console script name in the working directory is used instead.
    """

    path = Path(argv0)
    if path.name == "__main__.py":
        return Path.cwd() / CONSOLE_SCRIPT
    return path.resolve()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s - %(message)s",
        stream=sys.stderr,
    )


def report_error(prefix: str, exc: Exception) -> None:
    print(colorize(f"{prefix}: {exc}", Ansi.RED), file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None, executable: Optional[Union[str, Path]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if executable is None:
        executable = default_executable(sys.argv[0])

    try:
        options = parse_args(argv, executable)
    except ArgumentError as exc:
        report_error("Error", exc)
        print(build_parser(executable).format_help(), file=sys.stderr)
        return 2

    if options.show_help:
        print(build_parser(executable).format_help())
        return 0
    if options.generate_config:
        print(CONFIG_TEMPLATE, end="")
        return 0

    configure_logging(options.log_level)
    if options.ignored:
        logger.debug("Ignoring unrecognised arguments: %s", " ".join(options.ignored))

    try:
        cfg = load_config(options.config_file)
    except ConfigError as exc:
        report_error("Error reading configuration file", exc)
        return 1

    runner = InventorySourceRunner(cfg, host=options.host, error_callback=report_error)
    try:
        return runner.run()
    except Exception as exc:  # noqa: BLE001
        if logging.getLogger().isEnabledFor(logging.DEBUG):
            raise
        report_error("Execution failed", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
