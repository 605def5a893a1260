from typing import TYPE_CHECKING, Any, Optional, Union

from eth_utils.address import to_checksum_address
from hexbytes import HexBytes

if TYPE_CHECKING:
    from eth_typing import ChecksumAddress

    from .search import Prefix

ADDRESS_LENGTH = 20


class AddressDecodeError(ValueError):
    """Raised for malformed textual addresses."""


class InvalidAddress(ValueError):
    """Raised when a non-zero address is built from the zero value."""


class Address:
    """An Ethereum address: 20 raw bytes rendered in EIP-55 checksum form."""

    __slots__ = ("_value",)

    def __init__(self, value: bytes) -> None:
        if len(value) != ADDRESS_LENGTH:
            raise AddressDecodeError(
                f"Invalid address length {len(value)}, expected {ADDRESS_LENGTH} bytes."
            )
        self._value = bytes(value)

    @classmethod
    def zero(cls) -> "Address":
        return Address(bytes(ADDRESS_LENGTH))

    @classmethod
    def from_hex(cls, text: str):
        digits = text[2:] if text.startswith(("0x", "0X")) else text
        if len(digits) != 2 * ADDRESS_LENGTH:
            raise AddressDecodeError(f"Invalid address length: '{text}'.")
        try:
            value = bytes.fromhex(digits)
        except ValueError as exc:
            raise AddressDecodeError(f"Invalid hex digits in address: '{text}'.") from exc
        return cls(value)

    @property
    def is_zero(self) -> bool:
        return not any(self._value)

    def non_zero(self) -> Optional["NonZeroAddress"]:
        if self.is_zero:
            return None
        return NonZeroAddress(self._value)

    @property
    def checksum(self) -> "ChecksumAddress":
        return to_checksum_address(self._value)

    def starts_with(self, prefix: Union["Prefix", bytes]) -> bool:
        if isinstance(prefix, (bytes, bytearray)):
            return self._value.startswith(prefix)
        return prefix.matches(self._value)

    def to_0x_hex(self) -> str:
        return HexBytes(self._value).to_0x_hex()

    def __bytes__(self) -> bytes:
        return self._value

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return self.checksum

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.checksum})"

    def __reduce__(self):
        return (type(self), (self._value,))


class NonZeroAddress(Address):
    """An address that is guaranteed not to be the zero address."""

    __slots__ = ()

    def __init__(self, value: bytes) -> None:
        super().__init__(value)
        if self.is_zero:
            raise InvalidAddress("Invalid zero address.")

    def get(self) -> Address:
        return Address(self._value)


def parse_address(value: Any) -> Address:
    if isinstance(value, Address):
        return value
    if isinstance(value, str):
        return Address.from_hex(value)
    if isinstance(value, (bytes, bytearray)):
        return Address(bytes(value))
    raise AddressDecodeError(f"Cannot parse address from {type(value).__name__}.")


def parse_non_zero_address(value: Any) -> NonZeroAddress:
    if isinstance(value, NonZeroAddress):
        return value
    address = parse_address(value)
    non_zero = address.non_zero()
    if non_zero is None:
        raise InvalidAddress(f"Invalid zero address: '{address}'.")
    return non_zero
