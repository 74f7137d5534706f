"""ReviewStore CLI entry points.
This module exposes schema, load, lookup, and run-spec commands.
It maps argparse commands onto SDK calls over one store session.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.run_spec_command import add_run_spec_command, run_run_spec_command
from core.config import ReviewStoreConfig, parse_contact_points
from store.review_store_sdk import ReviewStoreClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="reviewstore",
        description="Bulk loader and lookups for the item/review store",
    )
    parser.add_argument("--keyspace", help="Override REVIEWSTORE_KEYSPACE for this command")
    parser.add_argument(
        "--contact-points",
        help="Override REVIEWSTORE_CONTACT_POINTS (comma-separated hosts)",
    )
    parser.add_argument(
        "--secure-bundle",
        help="Override REVIEWSTORE_SECURE_BUNDLE (Astra secure-connect bundle path)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_create_tables_command(subparsers)
    _add_load_commands(subparsers)
    _add_lookup_commands(subparsers)
    add_run_spec_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the ReviewStore CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    client = _build_client(args)
    client.connect()
    try:
        return _dispatch(parser, client, args)
    finally:
        client.close()


def _dispatch(
    parser: argparse.ArgumentParser,
    client: ReviewStoreClient,
    args: argparse.Namespace,
) -> int:
    if args.command == "create-tables":
        return _run_create_tables_command(client)
    if args.command == "load-items":
        print(f"items_loaded={client.load_items(args.source, args.workers)}")
        return 0
    if args.command == "load-reviews":
        print(f"reviews_loaded={client.load_reviews(args.source, args.workers)}")
        return 0
    if args.command == "item":
        item_text = client.item(args.asin)
        print(item_text, end="" if item_text.endswith("\n") else "\n")
        return 0
    if args.command == "user-reviews":
        return _print_reviews(client.user_reviews(args.reviewer_id))
    if args.command == "item-reviews":
        return _print_reviews(client.item_reviews(args.asin))
    if args.command == "run-spec":
        return run_run_spec_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(args: argparse.Namespace) -> ReviewStoreClient:
    """Build SDK client with optional connection overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Configured SDK client.
    """
    config = ReviewStoreConfig.from_env()
    if args.keyspace:
        config = replace(config, keyspace=args.keyspace)
    if args.contact_points:
        config = replace(config, contact_points=parse_contact_points(args.contact_points))
    if args.secure_bundle:
        config = replace(
            config,
            secure_connect_bundle=Path(args.secure_bundle).expanduser().resolve(),
        )
    return ReviewStoreClient(config)


def _run_create_tables_command(client: ReviewStoreClient) -> int:
    table_names = client.create_tables()
    print(f"tables_created={','.join(table_names)}")
    return 0


def _print_reviews(reviews: Any) -> int:
    for review in reviews:
        print(review, end="")
    return 0


def _add_create_tables_command(subparsers: Any) -> None:
    """Register create-tables subcommand."""
    subparsers.add_parser("create-tables", help="Create the item and review tables if absent")


def _add_load_commands(subparsers: Any) -> None:
    """Register load-items and load-reviews subcommands."""
    for command, noun in (("load-items", "item"), ("load-reviews", "review")):
        parser = subparsers.add_parser(command, help=f"Bulk-load {noun} records")
        parser.add_argument("source", help="Record file path or s3://bucket/key")
        parser.add_argument(
            "--workers",
            type=_positive_int,
            help="Concurrent writer count (default: REVIEWSTORE_WORKER_COUNT)",
        )


def _add_lookup_commands(subparsers: Any) -> None:
    """Register item, user-reviews, and item-reviews subcommands."""
    item_parser = subparsers.add_parser("item", help="Print one item")
    item_parser.add_argument("asin", help="Item identifier")
    user_parser = subparsers.add_parser("user-reviews", help="Print a reviewer's reviews")
    user_parser.add_argument("reviewer_id", help="Reviewer identifier")
    item_reviews_parser = subparsers.add_parser("item-reviews", help="Print an item's reviews")
    item_reviews_parser.add_argument("asin", help="Item identifier")


def _positive_int(raw_value: str) -> int:
    value = int(raw_value)
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected a value >= 1, got {value}")
    return value
