#!/usr/bin/env python3
"""
Allow-list Merkle CLI

Builds the presale allow-list tree from a YAML or JSON file and prints the
root to pass to `setMerkleRoot`, or the proof an address passes to
`preSaleMint`.

The file is either a list of addresses or a mapping with an `addresses` list.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, List

import click
import yaml

from erc721r_spec.crypto.hash_algorithms import address_leaf, checksum, to_address
from erc721r_spec.errors import SpecError
from erc721r_spec.merkle import MerkleTree, build_allow_list, hex_to_node, verify_proof

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def load_allow_list(path: Path) -> List[bytes]:
    """Read addresses from a YAML/JSON allow-list file."""
    with open(path) as f:
        data: Any = yaml.safe_load(f)

    if isinstance(data, dict):
        data = data.get("addresses")
    if not isinstance(data, list) or not data:
        raise click.ClickException(f"{path}: expected a non-empty list of addresses")

    addresses = []
    for entry in data:
        # YAML reads unquoted 0x... values as hex integers.
        if isinstance(entry, int) and not isinstance(entry, bool):
            entry = f"0x{entry:040x}"
        try:
            addresses.append(to_address(str(entry)))
        except SpecError as e:
            raise click.ClickException(f"{path}: {e.message}") from e

    unique = list(dict.fromkeys(addresses))
    if len(unique) != len(addresses):
        logger.warning(f"Dropped {len(addresses) - len(unique)} duplicate addresses")
    return unique


def _tree(addresses: List[bytes]) -> MerkleTree:
    tree = build_allow_list(addresses)
    logger.info(f"Built allow-list tree: {len(tree)} leaves, depth {tree.depth}")
    return tree


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Presale allow-list Merkle tools."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument("allow_list", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print root and per-address proofs as JSON")
def root(allow_list: Path, as_json: bool):
    """Print the Merkle root of ALLOW_LIST."""
    addresses = load_allow_list(allow_list)
    tree = _tree(addresses)
    if not as_json:
        click.echo(tree.hex_root())
        return

    out = {
        "root": tree.hex_root(),
        "proofs": {checksum(a): tree.hex_proof(address_leaf(a)) for a in addresses},
    }
    click.echo(json.dumps(out, indent=2))


@cli.command()
@click.argument("allow_list", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("address")
def proof(allow_list: Path, address: str):
    """Print the proof for ADDRESS, one sibling per line."""
    tree = _tree(load_allow_list(allow_list))
    try:
        siblings = tree.hex_proof(address_leaf(address))
    except SpecError as e:
        raise click.ClickException(f"{address}: {e.message}") from e
    for sibling in siblings:
        click.echo(sibling)


@cli.command()
@click.argument("root_hex", metavar="ROOT")
@click.argument("address")
@click.argument("siblings", nargs=-1)
def verify(root_hex: str, address: str, siblings: tuple):
    """Check that ADDRESS is under ROOT given the proof SIBLINGS."""
    try:
        root_node = hex_to_node(root_hex)
        nodes = [hex_to_node(s) for s in siblings]
        leaf = address_leaf(address)
    except (SpecError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if verify_proof(nodes, root_node, leaf):
        click.echo("valid")
        return
    click.echo("invalid")
    sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
