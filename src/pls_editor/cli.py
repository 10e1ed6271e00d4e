"""
Command-line interface for pronunciation lexicon files.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import Config, build_gateway, configure_logging, load_config
from .exceptions import ConfigError, PlsEditorError
from .models import SUPPORTED_LANGUAGES, LexiconEntry
from .session import EditSession, normalize_file_name


def main(argv: Optional[list] = None) -> int:
    """Main entry point for pls-editor CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    if args.func is cmd_languages:
        return cmd_languages(args)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"\n  [CONFIG ERROR] {e}")
        if e.line:
            print(f"                Line: {e.line}")
        return 1
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    configure_logging(config, verbose=args.verbose)
    session = EditSession(
        build_gateway(config), default_language=config.default_language
    )

    try:
        return args.func(args, session, config)
    except PlsEditorError as e:
        print(f"\n  [ERROR] {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pls-editor",
        description="View and edit pronunciation lexicon (PLS) XML files",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List lexicon files in storage",
    )
    list_parser.set_defaults(func=cmd_list)

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show the entries of a lexicon",
    )
    show_parser.add_argument("name", help="Lexicon file name")
    show_parser.add_argument(
        "--query", "-q",
        help="Only show entries matching this text",
    )
    show_parser.set_defaults(func=cmd_show)

    # export command
    export_parser = subparsers.add_parser(
        "export",
        help="Download a lexicon as normalized XML",
    )
    export_parser.add_argument("name", help="Lexicon file name")
    export_parser.add_argument("destination", type=Path, help="Output file")
    export_parser.set_defaults(func=cmd_export)

    # new command
    new_parser = subparsers.add_parser(
        "new",
        help="Create and save a new lexicon",
    )
    new_parser.add_argument("name", help="Lexicon name (.xml is added if omitted)")
    new_parser.add_argument(
        "--language", "-l",
        help="Language tag (default from config)",
    )
    new_parser.set_defaults(func=cmd_new)

    # duplicate command
    duplicate_parser = subparsers.add_parser(
        "duplicate",
        help="Save a copy of a lexicon as duplicate-of-<name>.xml",
    )
    duplicate_parser.add_argument("name", help="Lexicon file name")
    duplicate_parser.set_defaults(func=cmd_duplicate)

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add an entry to a lexicon",
    )
    add_parser.add_argument("name", help="Lexicon file name")
    add_parser.add_argument("graphemes", nargs="+", help="Written form(s)")
    add_parser.add_argument("--alias", help="Alias text")
    add_parser.add_argument("--phoneme", help="IPA pronunciation")
    add_parser.set_defaults(func=cmd_add)

    # delete command
    delete_parser = subparsers.add_parser(
        "delete",
        help="Delete an entry from a lexicon",
    )
    delete_parser.add_argument("name", help="Lexicon file name")
    delete_parser.add_argument("index", type=int, help="Entry number (from 'show')")
    delete_parser.set_defaults(func=cmd_delete)

    # languages command
    languages_parser = subparsers.add_parser(
        "languages",
        help="List suggested language tags",
    )
    languages_parser.set_defaults(func=cmd_languages)

    return parser


def cmd_list(args: argparse.Namespace, session: EditSession, config: Config) -> int:
    """Handle list command."""
    names = session.refresh_files()
    if not names:
        print("No lexicon files found.")
        return 0
    for name in names:
        print(name)
    return 0


def cmd_show(args: argparse.Namespace, session: EditSession, config: Config) -> int:
    """Handle show command."""
    session.open(args.name)
    matches = session.filter(args.query)

    print(f"\n{session.current_file_name} ({session.language})")
    print(f"  Entries: {len(session.entries)}")
    if args.query:
        print(f"  Matching \"{args.query}\": {len(matches)}")
    print()

    for idx, entry in matches:
        _print_entry(idx, entry)
    return 0


def cmd_export(args: argparse.Namespace, session: EditSession, config: Config) -> int:
    """Handle export command."""
    session.open(args.name)
    path = session.export(args.destination)
    print(f"Exported {len(session.entries)} entries to {path}")
    return 0


def cmd_new(args: argparse.Namespace, session: EditSession, config: Config) -> int:
    """Handle new command."""
    file_name = normalize_file_name(args.name)
    if file_name in session.refresh_files():
        print(f"\n  [ERROR] {file_name} already exists")
        return 1
    state = session.create_new(file_name, args.language)
    session.save()
    print(f"Created {state.file_name} ({state.language})")
    return 0


def cmd_duplicate(args: argparse.Namespace, session: EditSession, config: Config) -> int:
    """Handle duplicate command."""
    session.open(args.name)
    state = session.duplicate()
    session.save()
    print(f"Saved copy as {state.file_name} ({len(state.entries)} entries)")
    return 0


def cmd_add(args: argparse.Namespace, session: EditSession, config: Config) -> int:
    """Handle add command."""
    session.open(args.name)
    session.add_entry()
    session.set_grapheme(0, args.graphemes[0])
    for i, grapheme in enumerate(args.graphemes[1:], start=1):
        session.add_grapheme()
        session.set_grapheme(i, grapheme)
    if args.alias:
        session.set_alias(args.alias)
    if args.phoneme:
        session.set_phoneme(args.phoneme)

    index = session.selected_index
    session.save()
    print(f"Added entry #{index} to {session.current_file_name}")
    _print_entry(index, session.entries[index])
    return 0


def cmd_delete(args: argparse.Namespace, session: EditSession, config: Config) -> int:
    """Handle delete command."""
    session.open(args.name)
    entry = session.entries[args.index] if 0 <= args.index < len(session.entries) else None
    session.delete_entry(args.index)
    session.save()
    label = entry.label if entry else ""
    print(f"Deleted entry #{args.index} ({label}) from {session.current_file_name}")
    return 0


def cmd_languages(args: argparse.Namespace) -> int:
    """Handle languages command."""
    for tag, display in SUPPORTED_LANGUAGES.items():
        print(f"{tag:<8} {display}")
    return 0


def _print_entry(index: int, entry: LexiconEntry) -> None:
    """Print one entry as an indented block."""
    print(f"  [{index}] {' | '.join(entry.graphemes) or '(no grapheme)'}")
    if entry.alias:
        print(f"       alias:   {entry.alias}")
    if entry.phoneme:
        print(f"       phoneme: {entry.phoneme}")


if __name__ == "__main__":
    sys.exit(main())
