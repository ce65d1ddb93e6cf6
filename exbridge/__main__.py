"""
Command-line preview of the command formatter.

Usage:
    python -m exbridge [--execute] [--verbose] NAME [ARG ...]

Formats the command NAME with the given string arguments against a fresh
in-memory host (autoload extensions active) and prints the command string.
With --execute the command also runs and its captured output is printed.

Examples:
    python -m exbridge autocmd BufWritePost "*.py" ++once echo saved
    python -m exbridge --execute echo "Hello, world!"
"""
import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from .commands import Commands
from .faults import BridgeException, trigger
from .host import MemoryHost

console = Console()


def build_parser():
    parser = argparse.ArgumentParser(
        prog="exbridge",
        description="Format (and optionally run) an Ex command against an in-memory host.",
    )
    parser.add_argument("name", metavar="NAME", help="command name, with a trailing ! for the bang variant")
    parser.add_argument("arguments", metavar="ARG", nargs="*", help="command arguments, passed as strings")
    parser.add_argument("-x", "--execute", action="store_true", help="run the command and print its output")
    parser.add_argument("-v", "--verbose", action="store_true", help="log registrations and executed commands")
    return parser


def main(argv=None):
    options = build_parser().parse_args(argv)
    if options.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    commands = Commands(MemoryHost())
    try:
        proxy = commands[options.name]
        console.print(proxy.format(*options.arguments), markup=False, highlight=False)
        if options.execute and (output := proxy.output(*options.arguments)):
            console.print(output, markup=False, highlight=False)
    except BridgeException as fault:
        trigger(fault, shell=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
