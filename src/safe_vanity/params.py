from typing import Any, Callable, TypeVar

import click
from click import Command
from click_option_group import MutuallyExclusiveOptionGroup, optgroup

from .constants import DEFAULT_CHAIN_ID
from .search import default_workers
from .validation import (
    ADDRESS,
    ANY_ADDRESS,
    CHAIN,
    HEX_BYTES,
    PREFIX,
    SALT_NONCE,
    verbose_callback,
)

FC = TypeVar("FC", bound=Callable[..., Any] | Command)

# ┌─────────┐
# │ Options │
# └─────────┘


def common(f: FC) -> FC:
    for option in reversed(
        [
            click.option(
                "--verbose",
                "-v",
                is_flag=True,
                expose_value=False,
                is_eager=True,
                help="print informational messages",
                callback=verbose_callback,
            ),
        ]
    ):
        f = option(f)
    return f


def deployment(f: FC) -> FC:
    for option in reversed(
        [
            optgroup.group("Deployment settings"),
            optgroup.option(
                "--chain",
                "-c",
                type=CHAIN,
                default=str(DEFAULT_CHAIN_ID),
                help="chain name or ID to look up canonical contracts",
            ),
            optgroup.option(
                "--proxy-factory",
                type=ADDRESS,
                metavar="ADDRESS",
                help="override the SafeProxyFactory address",
            ),
            optgroup.option(
                "--proxy-init-code",
                type=HEX_BYTES,
                metavar="BYTES",
                help="override the SafeProxy creation code",
            ),
            optgroup.option(
                "--singleton",
                type=ADDRESS,
                metavar="ADDRESS",
                help="override the Safe singleton address",
            ),
            optgroup.option(
                "--safe-to-l2-setup",
                type=ADDRESS,
                metavar="ADDRESS",
                help="override the SafeToL2Setup address",
            ),
            optgroup.option(
                "--l2-singleton",
                type=ADDRESS,
                metavar="ADDRESS",
                help="override the SafeL2 singleton for multi-chain setup",
            ),
            optgroup.option(
                "--no-l2-setup",
                is_flag=True,
                default=False,
                help="do not use the SafeToL2Setup multi-chain setup",
            ),
            optgroup.group("Initialization settings"),
            optgroup.option(
                "--owner",
                "owners",
                multiple=True,
                type=ADDRESS,
                metavar="ADDRESS",
                help="add an owner (repeat option to add more)",
            ),
            optgroup.option(
                "--threshold",
                "-t",
                type=int,
                default=1,
                help="number of required confirmations",
            ),
            optgroup.option(
                "--fallback-handler",
                type=ADDRESS,
                metavar="ADDRESS",
                help="override the fallback handler address",
            ),
            optgroup.option(
                "--identifier",
                type=ANY_ADDRESS,
                metavar="ADDRESS",
                help="tag passed as the setup payment receiver",
            ),
            optgroup.option(
                "--config",
                "config_file",
                type=click.File("r"),
                help="read the Safe configuration from a JSON file",
            ),
        ]
    ):
        f = option(f)
    return f


def output_mode(f: FC) -> FC:
    for option in reversed(
        [
            optgroup.group("Output", cls=MutuallyExclusiveOptionGroup),
            optgroup.option(
                "--quiet",
                "-q",
                is_flag=True,
                default=False,
                help="only print the transaction calldata",
            ),
            optgroup.option(
                "--params",
                "-P",
                "params_mode",
                is_flag=True,
                default=False,
                help="print the createProxyWithNonce parameters",
            ),
            optgroup.option(
                "--json",
                "json_",
                is_flag=True,
                default=False,
                help="print the result as JSON",
            ),
        ]
    ):
        f = option(f)
    return f


explorer = click.option(
    "--explorer",
    metavar="URL",
    help="block explorer URL to link the proxy factory in --params mode",
)

output_file = click.option(
    "--output", "-o", type=click.File(mode="w"), help="write output to FILENAME"
)

prefix = click.option(
    "--prefix",
    "-p",
    type=PREFIX,
    required=True,
    help="hex prefix of the Safe address to look for",
)

salt_nonce = click.option(
    "--salt-nonce",
    type=SALT_NONCE,
    metavar="UINT256",
    default="0",
    help="salt nonce as a decimal or 0x-prefixed hex number",
)

threads = click.option(
    "--threads",
    "-n",
    type=click.IntRange(min=1),
    default=default_workers,
    show_default="number of CPUs",
    help="number of parallel search workers",
)
