import logging
import shutil
import sys
import typing
from typing import Optional

import click
from click.core import ParameterSource
from hexbytes import HexBytes
from pydantic import ValidationError

from . import params
from .address import Address, NonZeroAddress
from .chains import UNSUPPORTED_CHAINS, Chain, fetch_chain
from .console import (
    SAFE_VANITY_DEBUG,
    activate_logging,
    get_console,
    get_output_console,
    handle_crash,
    make_status_logger,
    print_safe_deployment,
    print_version,
)
from .deployment import Safe
from .models import (
    Configuration,
    ConfigurationError,
    Creation,
    HostConfiguration,
    make_configuration,
)
from .search import Prefix, parallel_search

# ┌───────┐
# │ Setup │
# └───────┘

logger = logging.getLogger(__name__)
status = make_status_logger(logger)

sys.excepthook = handle_crash

# ┌──────────┐
# │ Workflow │
# └──────────┘


# Options that --config replaces.
CONFIGURATION_OPTIONS = {
    "owners": "--owner",
    "threshold": "--threshold",
    "proxy_factory": "--proxy-factory",
    "proxy_init_code": "--proxy-init-code",
    "singleton": "--singleton",
    "safe_to_l2_setup": "--safe-to-l2-setup",
    "l2_singleton": "--l2-singleton",
    "no_l2_setup": "--no-l2-setup",
    "fallback_handler": "--fallback-handler",
    "identifier": "--identifier",
}


def _given_options(options: dict[str, str]) -> list[str]:
    ctx = click.get_current_context()
    given: list[str] = []
    for name, flag in options.items():
        source = ctx.get_parameter_source(name)
        if source is not None and source is not ParameterSource.DEFAULT:
            given.append(flag)
    return given


def resolve_configuration(
    *,
    chain_id: int,
    config_file: Optional[typing.TextIO],
    fallback_handler: Optional[NonZeroAddress],
    identifier: Optional[Address],
    l2_singleton: Optional[NonZeroAddress],
    no_l2_setup: bool,
    owners: tuple[NonZeroAddress, ...],
    proxy_factory: Optional[NonZeroAddress],
    proxy_init_code: Optional[HexBytes],
    safe_to_l2_setup: Optional[NonZeroAddress],
    singleton: Optional[NonZeroAddress],
    threshold: int,
) -> tuple[Configuration, Optional[Chain]]:
    """Merge command-line overrides with the chain's canonical deployment."""
    if config_file is not None:
        conflicting = _given_options(CONFIGURATION_OPTIONS)
        if conflicting:
            raise click.UsageError(
                f"--config cannot be combined with {', '.join(conflicting)}."
            )
        try:
            host_config = HostConfiguration.model_validate_json(config_file.read())
            return host_config.to_configuration(), fetch_chain(chain_id)
        except (ValidationError, ConfigurationError) as exc:
            raise click.ClickException(f"Invalid configuration file: {exc}") from exc

    if chain_id in UNSUPPORTED_CHAINS:
        raise click.ClickException(
            f"{UNSUPPORTED_CHAINS[chain_id]} (chain {chain_id}) is not supported."
        )
    if not owners:
        raise click.UsageError("At least one --owner is required.")

    explicit_setup = safe_to_l2_setup is not None or l2_singleton is not None
    if explicit_setup and no_l2_setup:
        raise click.UsageError(
            "--no-l2-setup cannot be combined with --safe-to-l2-setup or --l2-singleton."
        )

    chain = fetch_chain(chain_id)
    deployment = chain.deployment if chain else None
    if deployment is not None:
        use_setup = explicit_setup or (
            not no_l2_setup and not deployment.safe_to_l2_setup.is_zero
        )
    else:
        use_setup = explicit_setup
    if deployment is not None:
        proxy_factory = proxy_factory or deployment.proxy_factory
        if proxy_init_code is None:
            proxy_init_code = deployment.proxy_init_code
        fallback_handler = fallback_handler or deployment.fallback_handler.non_zero()
        if use_setup:
            # The L1 singleton is swapped for the L2 one on L2 chains at setup.
            singleton = singleton or deployment.safe_singleton
            safe_to_l2_setup = safe_to_l2_setup or deployment.safe_to_l2_setup.non_zero()
            l2_singleton = l2_singleton or deployment.safe_l2_singleton
        else:
            assert chain is not None
            singleton = singleton or chain.singleton
    if proxy_factory is None or proxy_init_code is None or singleton is None:
        raise click.UsageError(
            f"Chain {chain_id} has no canonical Safe deployment: "
            "--proxy-factory, --proxy-init-code and --singleton are required."
        )
    if not use_setup:
        safe_to_l2_setup = l2_singleton = None

    try:
        configuration = make_configuration(
            proxy_factory=proxy_factory,
            proxy_init_code=proxy_init_code,
            singleton=singleton,
            owners=list(owners),
            threshold=threshold,
            safe_to_l2_setup=safe_to_l2_setup,
            l2_singleton=l2_singleton,
            fallback_handler=fallback_handler,
            identifier=identifier,
        )
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    return configuration, chain


def print_result(
    safe: Safe,
    *,
    chain: Optional[Chain],
    prefix: Optional[Prefix],
    quiet: bool,
    params_mode: bool,
    json_: bool,
    explorer: Optional[str],
    output: Optional[typing.TextIO],
) -> None:
    output_console = get_output_console(output)
    transaction = safe.transaction()
    if quiet:
        output_console.print(transaction.calldata.to_0x_hex(), highlight=False)
        return
    if json_:
        creation = Creation.from_safe(safe)
        output_console.print_json(creation.model_dump_json())
        return
    if params_mode:
        factory = safe.configuration.proxy.factory
        if explorer is not None:
            factory_link = f"{explorer.rstrip('/')}/address/{factory}#writeContract#F3"
        elif chain is not None:
            factory_link = chain.explorer.create_proxy_with_nonce_url(factory)
        else:
            factory_link = str(factory)
        lines = {
            "address": str(safe.creation_address()),
            "factory": factory_link,
            "singleton": str(safe.configuration.proxy.singleton),
            "initializer": safe.initializer().to_0x_hex(),
            "salt nonce": "0x" + safe.salt_nonce().hex(),
        }
        for key, value in lines.items():
            output_console.print(f"{key + ':':<13}{value}", highlight=False)
        return

    console = get_console()
    console.line()
    print_safe_deployment(safe, chain, prefix)
    console.line()
    output_console.print(transaction.calldata.to_0x_hex(), highlight=False)


# ┌──────┐
# │ Main │
# └──────┘


@click.group(
    context_settings=dict(
        show_default=True,
        max_content_width=shutil.get_terminal_size().columns,
        help_option_names=["-h", "--help"],
    ),
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="print version info and exit",
)
def main():
    """Find vanity addresses for Safe account deployments."""
    if SAFE_VANITY_DEBUG:
        activate_logging()


# ┌──────────┐
# │ Commands │
# └──────────┘


@main.command()
@params.prefix
@params.deployment
@params.threads
@params.output_mode
@params.explorer
@params.output_file
@params.common
def search(
    chain: int,
    config_file: Optional[typing.TextIO],
    explorer: Optional[str],
    fallback_handler: Optional[NonZeroAddress],
    identifier: Optional[Address],
    json_: bool,
    l2_singleton: Optional[NonZeroAddress],
    no_l2_setup: bool,
    output: Optional[typing.TextIO],
    owners: tuple[NonZeroAddress, ...],
    params_mode: bool,
    prefix: Prefix,
    proxy_factory: Optional[NonZeroAddress],
    proxy_init_code: Optional[HexBytes],
    quiet: bool,
    safe_to_l2_setup: Optional[NonZeroAddress],
    singleton: Optional[NonZeroAddress],
    threads: int,
    threshold: int,
):
    """Search for a salt nonce giving a Safe address with the given prefix.

    Each additional hex digit multiplies the expected search time by 16.
    """
    if explorer is not None and not params_mode:
        raise click.UsageError("--explorer can only be used with --params.")
    configuration, chain_info = resolve_configuration(
        chain_id=chain,
        config_file=config_file,
        fallback_handler=fallback_handler,
        identifier=identifier,
        l2_singleton=l2_singleton,
        no_l2_setup=no_l2_setup,
        owners=owners,
        proxy_factory=proxy_factory,
        proxy_init_code=proxy_init_code,
        safe_to_l2_setup=safe_to_l2_setup,
        singleton=singleton,
        threshold=threshold,
    )
    with status(
        f"Searching for prefix {prefix} with {threads} workers "
        f"(~{prefix.expected_attempts():,} attempts expected)..."
    ):
        safe = parallel_search(configuration, prefix, workers=threads)
    print_result(
        safe,
        chain=chain_info,
        prefix=prefix,
        quiet=quiet,
        params_mode=params_mode,
        json_=json_,
        explorer=explorer,
        output=output,
    )


@main.command()
@params.salt_nonce
@params.deployment
@params.output_mode
@params.explorer
@params.output_file
@params.common
def precompute(
    chain: int,
    config_file: Optional[typing.TextIO],
    explorer: Optional[str],
    fallback_handler: Optional[NonZeroAddress],
    identifier: Optional[Address],
    json_: bool,
    l2_singleton: Optional[NonZeroAddress],
    no_l2_setup: bool,
    output: Optional[typing.TextIO],
    owners: tuple[NonZeroAddress, ...],
    params_mode: bool,
    proxy_factory: Optional[NonZeroAddress],
    proxy_init_code: Optional[HexBytes],
    quiet: bool,
    safe_to_l2_setup: Optional[NonZeroAddress],
    salt_nonce: bytes,
    singleton: Optional[NonZeroAddress],
    threshold: int,
):
    """Compute a Safe address offline for a given salt nonce."""
    if explorer is not None and not params_mode:
        raise click.UsageError("--explorer can only be used with --params.")
    configuration, chain_info = resolve_configuration(
        chain_id=chain,
        config_file=config_file,
        fallback_handler=fallback_handler,
        identifier=identifier,
        l2_singleton=l2_singleton,
        no_l2_setup=no_l2_setup,
        owners=owners,
        proxy_factory=proxy_factory,
        proxy_init_code=proxy_init_code,
        safe_to_l2_setup=safe_to_l2_setup,
        singleton=singleton,
        threshold=threshold,
    )
    safe = Safe(configuration)
    safe.set_salt_nonce(salt_nonce)
    logger.info(f"Computed {safe.creation_address()} for salt nonce 0x{salt_nonce.hex()}")
    print_result(
        safe,
        chain=chain_info,
        prefix=None,
        quiet=quiet,
        params_mode=params_mode,
        json_=json_,
        explorer=explorer,
        output=output,
    )


if __name__ == "__main__":
    main()
