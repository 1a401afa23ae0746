"""Command-line interface: render the deck, list slides and datasets."""

from __future__ import annotations

import argparse
import logging
import sys

from .core.config import APP_NAME, APP_VERSION, load_config
from .core.logging_config import setup_logging
from .data import list_datasets, load_dataset
from .deck import build_default_deck, load_deck, render_deck, save_deck
from .deck.writer import FORMATS
from .errors import AnnoDeckError

log = logging.getLogger(__name__)


def _deck_from_args(args: argparse.Namespace):
    return load_deck(args.deck) if args.deck else build_default_deck()


def cmd_render(args: argparse.Namespace, config: dict) -> int:
    deck = _deck_from_args(args)
    result = render_deck(
        deck,
        args.out or config["output_dir"],
        formats=args.format or config["formats"],
        only=args.only,
        embed_images=args.embed_images or config["embed_images"],
        dpi=args.dpi or config["dpi"],
        template_id=args.template or config["template_id"],
    )
    for doc in result.documents:
        print(doc)
    return 0


def cmd_list(args: argparse.Namespace, config: dict) -> int:
    deck = _deck_from_args(args)
    for slide in deck.slides:
        marker = "*" if slide.figure is not None else " "
        print(f"{marker} {slide.slide_id:<18} {slide.title}")
    return 0


def cmd_datasets(args: argparse.Namespace, config: dict) -> int:
    for name in list_datasets():
        df = load_dataset(name)
        print(f"{name:<10} {len(df):>4} rows  {', '.join(df.columns)}")
    return 0


def cmd_export_deck(args: argparse.Namespace, config: dict) -> int:
    save_deck(args.path, build_default_deck())
    print(f"Wrote {args.path}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("annodeck", description=f"{APP_NAME} {APP_VERSION}: chart annotation slides")
    parser.add_argument("--config", default=None, help="JSON file overriding the defaults")
    parser.add_argument("--log-dir", default=None, help="directory for rotating log files")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output on the console")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("render", help="render slides to images and documents")
    sp.add_argument("--deck", default=None, help="deck JSON file (default: built-in tutorial)")
    sp.add_argument("--out", default=None, help="output directory")
    sp.add_argument("--format", action="append", choices=FORMATS, help="repeat for several formats")
    sp.add_argument("--only", nargs="+", default=None, metavar="SLIDE_ID")
    sp.add_argument("--embed-images", action="store_true", help="inline PNGs into the HTML deck")
    sp.add_argument("--dpi", type=float, default=None)
    sp.add_argument("--template", default=None, help="page template applied to every slide")
    sp.set_defaults(func=cmd_render)

    sp = sub.add_parser("list", help="list slide ids")
    sp.add_argument("--deck", default=None)
    sp.set_defaults(func=cmd_list)

    sp = sub.add_parser("datasets", help="list bundled datasets")
    sp.set_defaults(func=cmd_datasets)

    sp = sub.add_parser("export-deck", help="write the built-in deck as JSON")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_export_deck)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)

    level_name = "DEBUG" if args.verbose else str(config["log_level"]).upper()
    setup_logging(
        app_name=APP_NAME,
        console_level=getattr(logging, level_name, logging.INFO),
        log_dir=args.log_dir or config["log_dir"],
    )

    try:
        return args.func(args, config)
    except AnnoDeckError as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
