"""Dump PuppetDB inventory as resource json.

Usage:
    python -m puppetdb_inventory --url http://puppetdb:8080 --username deploy
    python -m puppetdb_inventory --fact ipaddress --fact kernel

Options not given on the command line fall back to the PUPPETDB_* environment
variables read by PuppetDBConfig.from_env.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import replace

from puppetdb_inventory.core.config import PuppetDBConfig, build_plugin
from puppetdb_inventory.core.errors import InventoryError
from puppetdb_inventory.core.serialization import node_set_to_resources

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puppetdb-inventory",
        description="Print PuppetDB nodes and facts as resource json.",
    )
    parser.add_argument("--url", help="PuppetDB root url")
    parser.add_argument("--username", help="login applied to every node")
    parser.add_argument(
        "--fact",
        action="append",
        default=[],
        metavar="NAME",
        help="extra fact name to request, may be repeated",
    )
    parser.add_argument("--timeout", type=int, help="http timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress to stderr")
    return parser


def config_from_args(args: argparse.Namespace, environ: Mapping[str, str]) -> PuppetDBConfig:
    config = PuppetDBConfig.from_env(environ)
    if args.url:
        config = replace(config, base_url=args.url)
    if args.username:
        config = replace(config, username=args.username)
    if args.fact:
        config = replace(config, custom_fact_names=config.custom_fact_names | frozenset(args.fact))
    if args.timeout is not None:
        config = replace(config, timeout_seconds=args.timeout)
    return config


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = config_from_args(args, os.environ)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    with build_plugin(config) as plugin:
        try:
            node_set = plugin.get_nodes()
        except InventoryError as exc:
            logger.debug("Inventory fetch failed", exc_info=True)
            print(f"error: {exc}", file=sys.stderr)
            return 1

        json.dump(node_set_to_resources(node_set), sys.stdout, indent=2, sort_keys=True)
        sys.stdout.write("\n")
    return 0
