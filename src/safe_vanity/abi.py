"""Solidity ABI encoding of the Safe deployment calls.

The produced bytes feed directly into the CREATE2 salt, so any divergence from
the on-chain encoding yields a Safe deployed at a different address than the
one displayed.
"""

from typing import TYPE_CHECKING, Optional, Sequence

from eth_abi.abi import encode as abi_encode
from eth_utils.crypto import keccak
from hexbytes import HexBytes

from .address import Address
from .constants import (
    CREATE_PROXY_WITH_NONCE_FUNC_SELECTOR,
    CREATE_PROXY_WITH_NONCE_FUNC_TYPES,
    NONCE_LENGTH,
    SAFE_SETUP_FUNC_SELECTOR,
    SAFE_SETUP_FUNC_TYPES,
    SAFE_TO_L2_SETUP_FUNC_SELECTOR,
    SAFE_TO_L2_SETUP_FUNC_TYPES,
)

if TYPE_CHECKING:
    from .models import SafeToL2Setup


def _abi_address(address: Address) -> str:
    return "0x" + bytes(address).hex()


def encode_safe_setup(
    *,
    owners: Sequence[Address],
    threshold: int,
    to: Address,
    data: bytes,
    fallback_handler: Address,
    payment_receiver: Address,
) -> HexBytes:
    """Encode the `Safe.setup()` initializer call.

    `paymentToken` and `payment` are always zero. The identifier tag, when
    one is configured, travels in `paymentReceiver`.
    """
    zero = _abi_address(Address.zero())
    args = abi_encode(
        SAFE_SETUP_FUNC_TYPES,
        (
            [_abi_address(owner) for owner in owners],
            threshold,
            _abi_address(to),
            bytes(data),
            _abi_address(fallback_handler),
            zero,
            0,
            _abi_address(payment_receiver),
        ),
    )
    return HexBytes(HexBytes(SAFE_SETUP_FUNC_SELECTOR) + args)


def encode_safe_to_l2_setup(l2_singleton: Address) -> HexBytes:
    """Encode `SafeToL2Setup.setupToL2()` for multi-chain deployments."""
    args = abi_encode(SAFE_TO_L2_SETUP_FUNC_TYPES, (_abi_address(l2_singleton),))
    return HexBytes(HexBytes(SAFE_TO_L2_SETUP_FUNC_SELECTOR) + args)


def setup_call(setup: Optional["SafeToL2Setup"]) -> tuple[Address, bytes]:
    """Return the `to` and `data` delegate call arguments of `Safe.setup()`."""
    if setup is None:
        return Address.zero(), b""
    return setup.address, bytes(encode_safe_to_l2_setup(setup.l2_singleton))


def encode_create_proxy_with_nonce(
    *,
    singleton: Address,
    initializer: bytes,
    salt_nonce: bytes,
) -> HexBytes:
    """Encode the `SafeProxyFactory.createProxyWithNonce()` call."""
    if len(salt_nonce) != NONCE_LENGTH:
        raise ValueError(f"Salt nonce must be {NONCE_LENGTH} bytes.")
    args = abi_encode(
        CREATE_PROXY_WITH_NONCE_FUNC_TYPES,
        (
            _abi_address(singleton),
            bytes(initializer),
            int.from_bytes(salt_nonce, "big"),
        ),
    )
    return HexBytes(HexBytes(CREATE_PROXY_WITH_NONCE_FUNC_SELECTOR) + args)


def proxy_init_code_hash(init_code: bytes, singleton: Address) -> bytes:
    """keccak256(abi.encodePacked(proxyCreationCode, uint256(singleton)))"""
    deployment_data = bytes(init_code) + abi_encode(
        ("address",), (_abi_address(singleton),)
    )
    return keccak(deployment_data)
