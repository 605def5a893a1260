from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    NamedTuple,
    Optional,
)

from hexbytes import (
    HexBytes,
)
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
    model_validator,
)
from typing_extensions import Self

from .abi import encode_safe_setup, proxy_init_code_hash, setup_call
from .address import (
    Address,
    NonZeroAddress,
    parse_address,
    parse_non_zero_address,
)

if TYPE_CHECKING:
    from .deployment import Safe

# Safe OwnerManager linked-list sentinel, rejected as an owner on-chain.
SENTINEL_OWNERS = Address(bytes(19) + b"\x01")


class ConfigurationError(ValueError):
    pass


def parse_hex_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        digits = value[2:] if value.startswith(("0x", "0X")) else value
        if len(digits) % 2:
            raise ValueError(f"Odd number of hex digits in '{value}'.")
        return bytes(HexBytes(value))
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise ValueError(f"Cannot parse bytes from {type(value).__name__}.")


AddressField = Annotated[
    Address,
    BeforeValidator(parse_address),
    PlainSerializer(str, return_type=str),
]
NonZeroAddressField = Annotated[
    NonZeroAddress,
    BeforeValidator(parse_non_zero_address),
    PlainSerializer(str, return_type=str),
]
HexBytesField = Annotated[
    bytes,
    BeforeValidator(parse_hex_bytes),
    PlainSerializer(lambda value: HexBytes(value).to_0x_hex(), return_type=str),
]

# ┌───────────────┐
# │ Configuration │
# └───────────────┘


class Proxy(BaseModel):
    """The SafeProxy creation parameters."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    factory: NonZeroAddressField
    init_code: HexBytesField
    singleton: NonZeroAddressField

    def init_code_hash(self) -> bytes:
        return proxy_init_code_hash(self.init_code, self.singleton)


class SafeToL2Setup(BaseModel):
    """Multi-chain setup through the `SafeToL2Setup` contract."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    address: NonZeroAddressField
    l2_singleton: NonZeroAddressField


class Account(BaseModel):
    """The Safe account initialization parameters."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    owners: tuple[NonZeroAddressField, ...] = Field(min_length=1)
    threshold: int
    setup: Optional[SafeToL2Setup] = None
    fallback_handler: Optional[NonZeroAddressField] = None
    # Opaque tag passed as `paymentReceiver`, may be zero.
    identifier: Optional[AddressField] = None

    @model_validator(mode="after")
    def check_owners(self) -> Self:
        if not 1 <= self.threshold <= len(self.owners):
            raise ValueError(
                f"Threshold {self.threshold} must be between 1 and the number of owners ({len(self.owners)})."
            )
        seen: set[Address] = set()
        for owner in self.owners:
            if owner == SENTINEL_OWNERS:
                raise ValueError(f"Invalid owner address {owner}.")
            if owner in seen:
                raise ValueError(f"Duplicate owner address {owner}.")
            seen.add(owner)
        return self

    def initializer(self) -> HexBytes:
        to, data = setup_call(self.setup)
        return encode_safe_setup(
            owners=self.owners,
            threshold=self.threshold,
            to=to,
            data=data,
            fallback_handler=self.fallback_handler or Address.zero(),
            payment_receiver=self.identifier or Address.zero(),
        )


class Configuration(BaseModel):
    """Everything needed to derive a Safe creation address."""

    model_config = ConfigDict(frozen=True)

    proxy: Proxy
    account: Account


class Transaction(NamedTuple):
    to: Address
    calldata: HexBytes


def _format_validation_error(exc: ValidationError) -> str:
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def make_configuration(
    *,
    proxy_factory: Any,
    proxy_init_code: Any,
    singleton: Any,
    owners: list[Any],
    threshold: int,
    safe_to_l2_setup: Optional[Any] = None,
    l2_singleton: Optional[Any] = None,
    fallback_handler: Optional[Any] = None,
    identifier: Optional[Any] = None,
) -> Configuration:
    """Build a validated Configuration from flat parameters.

    The multi-chain setup requires both the `SafeToL2Setup` address and the
    `SafeL2` singleton, or neither of them.
    """
    if (safe_to_l2_setup is None) != (l2_singleton is None):
        raise ConfigurationError(
            "The SafeToL2Setup address and the L2 singleton must be specified together."
        )
    try:
        return Configuration(
            proxy=Proxy(
                factory=proxy_factory,
                init_code=proxy_init_code,
                singleton=singleton,
            ),
            account=Account(
                owners=tuple(owners),
                threshold=threshold,
                setup=SafeToL2Setup(
                    address=safe_to_l2_setup,
                    l2_singleton=l2_singleton,
                )
                if safe_to_l2_setup is not None
                else None,
                fallback_handler=fallback_handler,
                identifier=identifier,
            ),
        )
    except ValidationError as exc:
        raise ConfigurationError(_format_validation_error(exc)) from exc


# ┌─────────────┐
# │ Host bridge │
# └─────────────┘


class HostConfiguration(BaseModel):
    """Configuration as received from an embedding host, all fields hex strings."""

    model_config = ConfigDict(frozen=True, validate_by_name=True)

    proxy_factory: str = Field(alias="proxyFactory")
    proxy_init_code: str = Field(alias="proxyInitCode")
    singleton: str
    owners: list[str]
    threshold: int
    safe_to_l2_setup: Optional[str] = Field(default=None, alias="safeToL2Setup")
    l2_singleton: Optional[str] = Field(default=None, alias="l2Singleton")
    fallback_handler: Optional[str] = Field(default=None, alias="fallbackHandler")
    identifier: Optional[str] = None

    def to_configuration(self) -> Configuration:
        return make_configuration(**self.model_dump())


class TransactionData(BaseModel):
    to: str
    calldata: str


class Creation(BaseModel):
    """Search result as handed back to an embedding host."""

    model_config = ConfigDict(serialize_by_alias=True, validate_by_name=True)

    creation_address: str = Field(alias="creationAddress")
    salt_nonce: str = Field(alias="saltNonce")
    transaction: TransactionData

    @classmethod
    def from_safe(cls, safe: "Safe") -> "Creation":
        tx = safe.transaction()
        return cls(
            creation_address=str(safe.creation_address()),
            salt_nonce=HexBytes(safe.salt_nonce()).to_0x_hex(),
            transaction=TransactionData(
                to=str(tx.to),
                calldata=tx.calldata.to_0x_hex(),
            ),
        )
