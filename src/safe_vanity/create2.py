"""CREATE2 deterministic address computation.

The preimage is `0xff ‖ factory ‖ salt ‖ init_code_hash` (85 bytes); the
creation address is the last 20 bytes of its Keccak-256 digest.
"""

from eth_utils.crypto import keccak

from .address import ADDRESS_LENGTH, Address

PREIMAGE_LENGTH = 85

_FACTORY = slice(1, 21)
_SALT = slice(21, 53)
_INIT_CODE_HASH = slice(53, 85)


class Create2:
    __slots__ = ("_preimage",)

    def __init__(
        self, factory: Address, salt: bytes, init_code_hash: bytes
    ) -> None:
        self._preimage = bytearray(PREIMAGE_LENGTH)
        self._preimage[0] = 0xFF
        self.set_factory(factory)
        self.set_salt(salt)
        self.set_init_code_hash(init_code_hash)

    @property
    def factory(self) -> Address:
        return Address(bytes(self._preimage[_FACTORY]))

    @property
    def salt(self) -> bytes:
        return bytes(self._preimage[_SALT])

    @property
    def init_code_hash(self) -> bytes:
        return bytes(self._preimage[_INIT_CODE_HASH])

    def set_factory(self, factory: Address) -> None:
        self._preimage[_FACTORY] = bytes(factory)

    def set_salt(self, salt: bytes) -> None:
        if len(salt) != 32:
            raise ValueError("CREATE2 salt must be 32 bytes.")
        self._preimage[_SALT] = salt

    def set_init_code_hash(self, init_code_hash: bytes) -> None:
        if len(init_code_hash) != 32:
            raise ValueError("CREATE2 init code hash must be 32 bytes.")
        self._preimage[_INIT_CODE_HASH] = init_code_hash

    def preimage(self) -> bytes:
        return bytes(self._preimage)

    def creation_address(self) -> Address:
        digest = keccak(bytes(self._preimage))
        return Address(digest[32 - ADDRESS_LENGTH :])

    def copy(self) -> "Create2":
        clone = Create2.__new__(Create2)
        clone._preimage = bytearray(self._preimage)
        return clone
