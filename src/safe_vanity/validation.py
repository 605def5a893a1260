from typing import Any, Optional

import click
from hexbytes import HexBytes

from .address import Address, AddressDecodeError, InvalidAddress, NonZeroAddress
from .chains import parse_chain_id
from .console import SAFE_VANITY_DEBUG, activate_logging
from .models import parse_hex_bytes
from .search import Prefix


def verbose_callback(
    ctx: click.Context, opt: click.Option, value: Optional[bool]
) -> Optional[Any]:
    if value and not SAFE_VANITY_DEBUG:
        activate_logging()
    return None


class AddressType(click.ParamType):
    name = "address"

    def __init__(self, non_zero: bool = True) -> None:
        self.non_zero = non_zero

    def convert(
        self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]
    ) -> Address:
        if isinstance(value, Address):
            return value
        cls = NonZeroAddress if self.non_zero else Address
        try:
            return cls.from_hex(value)
        except (AddressDecodeError, InvalidAddress) as exc:
            self.fail(str(exc), param, ctx)


class HexBytesType(click.ParamType):
    name = "hex"

    def convert(
        self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]
    ) -> HexBytes:
        if isinstance(value, bytes):
            return HexBytes(value)
        try:
            return HexBytes(parse_hex_bytes(value))
        except ValueError:
            self.fail(f"Invalid hex bytes '{value}'.", param, ctx)


class PrefixType(click.ParamType):
    name = "prefix"

    def convert(
        self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]
    ) -> Prefix:
        if isinstance(value, Prefix):
            return value
        try:
            return Prefix.from_hex(value)
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


class ChainType(click.ParamType):
    name = "chain"

    def convert(
        self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]
    ) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_chain_id(value)
        except ValueError:
            self.fail(f"Invalid chain name or ID '{value}'.", param, ctx)


class SaltNonceType(click.ParamType):
    name = "nonce"

    def convert(
        self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]
    ) -> bytes:
        if isinstance(value, bytes):
            return value
        try:
            if value.startswith(("0x", "0X")):
                nonce = HexBytes(value).rjust(32, b"\x00")
            else:
                nonce = int(value).to_bytes(32, "big")
        except (ValueError, OverflowError):
            self.fail(f"Invalid uint256 salt nonce '{value}'.", param, ctx)
        if len(nonce) != 32:
            self.fail(f"Salt nonce '{value}' exceeds 32 bytes.", param, ctx)
        return bytes(nonce)


ADDRESS = AddressType()
ANY_ADDRESS = AddressType(non_zero=False)
HEX_BYTES = HexBytesType()
PREFIX = PrefixType()
CHAIN = ChainType()
SALT_NONCE = SaltNonceType()
