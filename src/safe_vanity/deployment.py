import logging
from typing import Callable, Union

from eth_utils.crypto import keccak
from hexbytes import HexBytes

from .abi import encode_create_proxy_with_nonce
from .address import Address
from .constants import NONCE_LENGTH
from .create2 import Create2
from .models import Configuration, Transaction

logger = logging.getLogger(__name__)

NonceMutator = Callable[[memoryview], None]


class Safe:
    """A Safe deployment whose creation address follows its salt nonce.

    SafeProxyFactory v1.3.0+ derives the CREATE2 salt as
    `keccak256(abi.encodePacked(keccak256(initializer), saltNonce))`. The
    first half of that preimage never changes, so updating the nonce costs
    exactly one hash before the next `creation_address()`.
    """

    __slots__ = ("configuration", "_initializer", "_salt", "_create2")

    def __init__(self, configuration: Configuration) -> None:
        self.configuration = configuration
        self._initializer = configuration.account.initializer()
        self._salt = bytearray(2 * NONCE_LENGTH)
        self._salt[:NONCE_LENGTH] = keccak(self._initializer)
        self._create2 = Create2(
            configuration.proxy.factory,
            keccak(bytes(self._salt)),
            configuration.proxy.init_code_hash(),
        )
        logger.debug(
            f"Initialized Safe deployment with initializer {self._initializer.to_0x_hex()}"
        )

    def creation_address(self) -> Address:
        return self._create2.creation_address()

    def salt_nonce(self) -> bytes:
        return bytes(self._salt[NONCE_LENGTH:])

    def initializer(self) -> HexBytes:
        return self._initializer

    def update_salt_nonce(self, mutator: NonceMutator) -> None:
        """Overwrite the salt nonce in place and recompute the CREATE2 salt.

        `mutator` receives a writable 32-byte view of the nonce. The salt
        follows whatever the nonce holds afterwards, even if `mutator` raises.
        """
        try:
            with memoryview(self._salt)[NONCE_LENGTH:] as nonce:
                mutator(nonce)
        finally:
            self._create2.set_salt(keccak(bytes(self._salt)))

    def set_salt_nonce(self, salt_nonce: Union[bytes, int]) -> None:
        if isinstance(salt_nonce, int):
            salt_nonce = salt_nonce.to_bytes(NONCE_LENGTH, "big")
        if len(salt_nonce) != NONCE_LENGTH:
            raise ValueError(f"Salt nonce must be {NONCE_LENGTH} bytes.")

        def assign(nonce: memoryview) -> None:
            nonce[:] = salt_nonce

        self.update_salt_nonce(assign)

    def transaction(self) -> Transaction:
        return Transaction(
            to=self.configuration.proxy.factory,
            calldata=encode_create_proxy_with_nonce(
                singleton=self.configuration.proxy.singleton,
                initializer=self._initializer,
                salt_nonce=self.salt_nonce(),
            ),
        )

    def copy(self) -> "Safe":
        clone = Safe.__new__(Safe)
        clone.configuration = self.configuration
        clone._initializer = self._initializer
        clone._salt = bytearray(self._salt)
        clone._create2 = self._create2.copy()
        return clone
