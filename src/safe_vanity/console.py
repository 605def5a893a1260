import logging
import os
import sys
import typing
from importlib.metadata import version
from types import TracebackType
from typing import TYPE_CHECKING, Any, Optional

import rich
from click import Context, Parameter
from rich.theme import Theme

from .constants import SYMBOL_CHECK, SYMBOL_WARNING

if TYPE_CHECKING:
    from rich.console import Console, RenderableType
    from rich.panel import Panel
    from rich.table import Table

    from .chains import Chain
    from .deployment import Safe
    from .search import Prefix


logger = logging.getLogger(__name__)

SAFE_VANITY_DEBUG = True if "SAFE_VANITY_DEBUG" in os.environ else False

rich.reconfigure(stderr=True, theme=Theme({"ok": "green", "warn": "yellow"}))
console = rich.get_console()


def activate_logging():
    from rich.logging import RichHandler

    if SAFE_VANITY_DEBUG:
        level = logging.NOTSET
    else:
        level = logging.INFO
    format = "<%(name)s.%(funcName)s> %(message)s"
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="[%X]",
        handlers=[RichHandler(console=get_console())],
    )


def get_console() -> "Console":
    """Return the console for human-readable output, which writes to stderr."""
    return console


def get_output_console(output: Optional[typing.TextIO] = None) -> "Console":
    """Return a Console suitable for printing results.

    The Console must not insert hard wraps, which Rich normally inserts by
    default. This is important when piping or writing hex-encoded calldata
    or a JSON object to a file.
    """
    from rich.console import Console

    return Console(file=output if output else sys.stdout, soft_wrap=True)


def get_kvtable(*args: dict[str, "RenderableType"]) -> "Table":
    from rich.box import Box
    from rich.table import Table
    from rich.text import Text

    custom_box: Box = Box(
        "    \n"  # top
        "    \n"  # head
        "    \n"  # head_row
        "    \n"  # mid
        " ── \n"  # row
        "    \n"  # foot_row
        "    \n"  # foot
        "    \n"  # bottom
    )
    table = Table(
        show_edge=False,
        show_header=False,
        box=custom_box,
    )
    table.add_column("Field", justify="right", style="bold", no_wrap=True)
    table.add_column("Value", no_wrap=False)
    for idx, arg in enumerate(args):
        for key, val in arg.items():
            if isinstance(val, str):
                table.add_row(key, Text.from_markup(val, overflow="fold"))
            else:
                table.add_row(key, val)
        if len(args) > 1 and idx < len(args) - 1:
            table.add_section()
    return table


def get_panel(title: str, subtitle: str, renderable: "RenderableType") -> "Panel":
    from rich.box import ROUNDED
    from rich.panel import Panel

    return Panel(
        renderable,
        box=ROUNDED,
        title=title,
        title_align="left",
        subtitle=subtitle,
        subtitle_align="right",
        border_style="bold italic",
        padding=(1, 1),
    )


def make_status_logger(logger: logging.Logger):
    def status_logger(message: str):
        console = get_console()
        logger.info(message, stacklevel=2)
        return console.status(message)

    return status_logger


def print_kvtable(
    title: str,
    subtitle: str,
    *args: dict[str, "RenderableType"],
) -> None:
    get_console().print(get_panel(title, subtitle, get_kvtable(*args)))


def _canonical(value: Any, canonical: Any, label: str = "CANONICAL") -> str:
    if canonical is None:
        return str(value)
    if value == canonical:
        return f"{value} [ok]{SYMBOL_CHECK} {label}[/ok]"
    return f"{value} [warn]{SYMBOL_WARNING} NON-{label}[/warn]"


def print_safe_deployment(
    safe: "Safe",
    chain: Optional["Chain"] = None,
    prefix: Optional["Prefix"] = None,
) -> None:
    proxy = safe.configuration.proxy
    account = safe.configuration.account
    deployment = chain.deployment if chain else None
    canonical_singleton = None
    if chain is not None:
        # Multi-chain setup always starts from the L1 singleton.
        canonical_singleton = (
            chain.deployment.safe_singleton if account.setup else chain.singleton
        )
    base_params: dict[str, "RenderableType"] = {
        "Proxy Factory": _canonical(
            proxy.factory, deployment.proxy_factory if deployment else None
        ),
        "Singleton": _canonical(proxy.singleton, canonical_singleton),
        "Salt Nonce": "0x" + safe.salt_nonce().hex(),
    }
    if chain is not None:
        base_params["Chain"] = f"{chain.name} ({chain.chain_id})"
    account_params: dict[str, "RenderableType"] = {
        f"Owners({len(account.owners)})": ", ".join(str(o) for o in account.owners),
        "Threshold": str(account.threshold),
        "Fallback Handler": _canonical(
            account.fallback_handler,
            deployment.fallback_handler if deployment else None,
            label="DEFAULT",
        )
        if account.fallback_handler
        else "<none>",
    }
    if account.setup is not None:
        account_params["SafeToL2Setup"] = str(account.setup.address)
        account_params["L2 Singleton"] = str(account.setup.l2_singleton)
    if account.identifier is not None:
        account_params["Identifier"] = str(account.identifier)
    result_params: dict[str, "RenderableType"] = {
        "Safe Address": str(safe.creation_address()),
    }
    if prefix is not None:
        result_params["Prefix"] = str(prefix)
    print_kvtable("Safe Deployment", "", base_params, account_params, result_params)


def print_version(ctx: Context, param: Parameter, value: Optional[bool]) -> None:
    if not value or ctx.resilient_parsing:
        return

    get_output_console().print(f"Safe Vanity v{version('safe-vanity')}", highlight=False)
    ctx.exit()


def handle_crash(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> None:
    import click
    from rich.traceback import Traceback

    console = get_console()
    if not SAFE_VANITY_DEBUG:
        console.print(f"[bold]{exc_type.__name__}[/bold]: {exc_value}")
    else:
        rich_traceback = Traceback.from_exception(
            exc_type,
            exc_value,
            exc_traceback,
            suppress=[click],
            show_locals=True,
        )
        console.print(rich_traceback)
