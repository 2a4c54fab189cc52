"""
Tagger - Command Line

Usage: tagger-cli [--config PATH] [--verbose] <command> <arguments>

Files are addressed by path, or by id as "uuid:<id>". Filters use the
filter syntax, e.g.  tagger-cli match status == 1 AND (tag1 OR tag2)
"""
import argparse
import asyncio
import json
import sys
from typing import Awaitable, Callable, Dict, List, Optional

from loguru import logger
from pymongo.errors import PyMongoError

from src.core.config import ConfigManager
from src.core.logging import setup_logging
from src.tagger import __version__
from src.tagger.errors import TaggerError
from src.tagger.models import format_tag
from src.tagger.service import TaggerService

NAME = "tagger-cli"

# (name, description), in the order shown by `help`
COMMANDS = [
    ("help", "prints a helpful usage message"),
    ("version", "prints version information"),
    # File manipulation
    ("add", "adds a file to the tag database"),
    ("remove", "removes a file from the tag database"),
    ("move", "moves a file to a new location"),
    # Tag manipulation
    ("set", "sets a tag on a file"),
    ("unset", "unsets a tag on a file"),
    # Querying
    ("match", "find files matching filter"),
    ("get", "gets the tags on a file"),
    ("files", "gets all files in database"),
    # Settings
    ("config", "shows or changes configuration"),
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=NAME, description="Tag files and select them with filter expressions.")
    parser.add_argument("-c", "--config", dest="config_path", default=None,
                        help="configuration file (default: $TAGGER_CONFIG or ~/.tagger/config.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output to stderr")

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    descriptions = dict(COMMANDS)

    sub.add_parser("help", help=descriptions["help"])
    sub.add_parser("version", help=descriptions["version"])

    p = sub.add_parser("add", help=descriptions["add"])
    p.add_argument("path")

    p = sub.add_parser("remove", help=descriptions["remove"])
    p.add_argument("file")

    p = sub.add_parser("move", help=descriptions["move"])
    p.add_argument("source")
    p.add_argument("destination")

    p = sub.add_parser("set", help=descriptions["set"])
    p.add_argument("file")
    p.add_argument("tag")
    p.add_argument("value", nargs="?", default=None)

    p = sub.add_parser("unset", help=descriptions["unset"])
    p.add_argument("file")
    p.add_argument("tag")

    p = sub.add_parser("match", help=descriptions["match"])
    p.add_argument("--strict", action="store_true", help="fail when no file matches")
    # REMAINDER keeps filter words such as "-1" from being read as options
    p.add_argument("filter", nargs=argparse.REMAINDER)

    p = sub.add_parser("get", help=descriptions["get"])
    p.add_argument("file")

    sub.add_parser("files", help=descriptions["files"])

    p = sub.add_parser("config", help=descriptions["config"])
    p.add_argument("action", nargs="?", choices=["show", "get", "set", "path"], default="show")
    p.add_argument("setting", nargs="*", help="SECTION KEY for `config get`, SECTION KEY VALUE for `config set`")

    return parser


def print_usage() -> None:
    print(f"Usage: {NAME} [command] <arguments>")
    print()
    print("Available commands:")
    for name, description in COMMANDS:
        print(f"  {name}: {description}")


# --- Storage-backed commands ---

Handler = Callable[[TaggerService, argparse.Namespace], Awaitable[int]]


async def _add(service: TaggerService, args: argparse.Namespace) -> int:
    file = await service.add_file(args.path)
    print(file.id)
    return 0


async def _remove(service: TaggerService, args: argparse.Namespace) -> int:
    await service.remove_file(args.file)
    return 0


async def _move(service: TaggerService, args: argparse.Namespace) -> int:
    await service.move_file(args.source, args.destination)
    return 0


async def _set(service: TaggerService, args: argparse.Namespace) -> int:
    await service.set_tag(args.file, args.tag, args.value)
    return 0


async def _unset(service: TaggerService, args: argparse.Namespace) -> int:
    await service.unset_tag(args.file, args.tag)
    return 0


async def _match(service: TaggerService, args: argparse.Namespace) -> int:
    # Arguments are stitched together so filters need no shell quoting
    text = " ".join(args.filter)
    for file in await service.match(text, allow_empty=not args.strict):
        print(file)
    return 0


async def _get(service: TaggerService, args: argparse.Namespace) -> int:
    tags = await service.get_tags(args.file)
    print(" ".join(format_tag(tag) for tag in tags))
    return 0


async def _files(service: TaggerService, args: argparse.Namespace) -> int:
    for file in await service.list_files():
        print(file)
    return 0


HANDLERS: Dict[str, Handler] = {
    "add": _add,
    "remove": _remove,
    "move": _move,
    "set": _set,
    "unset": _unset,
    "match": _match,
    "get": _get,
    "files": _files,
}


async def run_storage_command(config: ConfigManager, args: argparse.Namespace,
                              service: Optional[TaggerService] = None) -> int:
    async with (service or TaggerService(config)) as svc:
        return await HANDLERS[args.command](svc, args)


# --- Settings ---

def configure_logging(config: ConfigManager, verbose: bool = False) -> None:
    """Apply the `general` settings, and re-apply them whenever they change."""
    def apply():
        general = config.data.general
        setup_logging(debug_mode=verbose or general.debug_mode, log_dir=general.log_dir)

    def on_changed(section: str, key: str, value) -> None:
        if section == "general":
            apply()

    apply()
    config.on_changed.connect(on_changed)


def run_config_command(config: ConfigManager, args: argparse.Namespace) -> int:
    if args.action == "path":
        print(config.filepath)
        return 0
    if args.action == "show":
        print(config.dumps())
        return 0

    if args.action == "get":
        if len(args.setting) != 2:
            print("Error: usage: config get SECTION KEY", file=sys.stderr)
            return 2
        value = config.get(*args.setting)
        print(json.dumps(value) if not isinstance(value, str) else value)
        return 0

    if len(args.setting) != 3:
        print("Error: usage: config set SECTION KEY VALUE", file=sys.stderr)
        return 2
    section, key, value = args.setting
    config.update(section, key, value)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in (None, "help"):
        print_usage()
        return 0 if args.command == "help" else 1

    if args.command == "version":
        print(f"{NAME} v{__version__}")
        return 0

    if args.command == "match" and not args.filter:
        parser.error("match: a filter expression is required")

    # Logging goes to stderr only until the config says otherwise
    setup_logging(debug_mode=args.verbose)
    config = ConfigManager(args.config_path)
    configure_logging(config, args.verbose)

    try:
        if args.command == "config":
            return run_config_command(config, args)
        return asyncio.run(run_storage_command(config, args))
    except (TaggerError, ValueError, OSError, PyMongoError) as e:
        logger.opt(exception=e).debug(f"Command '{args.command}' failed")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
