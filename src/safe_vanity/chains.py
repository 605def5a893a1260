"""Canonical Safe deployments and supported chains.

Addresses come from the Safe deployments repository:
https://github.com/safe-global/safe-deployments/tree/main/src/assets
The proxy creation code is `SafeProxyFactory.proxyCreationCode()`.
"""

import dataclasses
from enum import Enum
from typing import Optional

from hexbytes import HexBytes

from .address import Address, NonZeroAddress


@dataclasses.dataclass(frozen=True, kw_only=True)
class Deployment:
    version: str
    proxy_factory: NonZeroAddress
    proxy_init_code: HexBytes
    safe_singleton: NonZeroAddress
    safe_l2_singleton: NonZeroAddress
    # Zero when the version has no SafeToL2Setup contract.
    safe_to_l2_setup: Address
    fallback_handler: Address


SAFE_V1_4_1 = Deployment(
    version="1.4.1",
    proxy_factory=NonZeroAddress.from_hex("0x4e1DCf7AD4e460CfD30791CCC4F9c8a4f820ec67"),
    proxy_init_code=HexBytes(
        "0x608060405234801561001057600080fd5b506040516101e63803806101e68339"
        "818101604052602081101561003357600080fd5b810190808051906020019092"
        "9190505050600073ffffffffffffffffffffffffffffffffffffffff168173ff"
        "ffffffffffffffffffffffffffffffffffffff1614156100ca576040517f08c3"
        "79a0000000000000000000000000000000000000000000000000000000008152"
        "6004018080602001828103825260228152602001806101c46022913960400191"
        "505060405180910390fd5b806000806101000a81548173ffffffffffffffffff"
        "ffffffffffffffffffffff021916908373ffffffffffffffffffffffffffffff"
        "ffffffffff1602179055505060ab806101196000396000f3fe608060405273ff"
        "ffffffffffffffffffffffffffffffffffffff600054167fa619486e00000000"
        "0000000000000000000000000000000000000000000000006000351415605057"
        "8060005260206000f35b3660008037600080366000845af43d6000803e600081"
        "14156070573d6000fd5b3d6000f3fea264697066735822122003d1488ee65e08"
        "fa41e58e888a9865554c535f2c77126a82cb4c0f917f31441364736f6c634300"
        "07060033496e76616c69642073696e676c65746f6e2061646472657373207072"
        "6f7669646564"
    ),
    safe_singleton=NonZeroAddress.from_hex("0x41675C099F32341bf84BFc5382aF534df5C7461a"),
    safe_l2_singleton=NonZeroAddress.from_hex(
        "0x29fcB43b46531BcA003ddC8FCB67FFE91900C762"
    ),
    safe_to_l2_setup=Address.from_hex("0xBD89A1CE4DDe368FFAB0eC35506eEcE0b1fFdc54"),
    fallback_handler=Address.from_hex("0xfd0732Dc9E303f09fCEf3a7388Ad10A83459Ec99"),
)

SAFE_V1_3_0 = Deployment(
    version="1.3.0",
    proxy_factory=NonZeroAddress.from_hex("0xa6B71E26C5e0845f74c812102Ca7114b6a896AB2"),
    proxy_init_code=HexBytes(
        "0x608060405234801561001057600080fd5b506040516101e63803806101e68339"
        "818101604052602081101561003357600080fd5b810190808051906020019092"
        "9190505050600073ffffffffffffffffffffffffffffffffffffffff168173ff"
        "ffffffffffffffffffffffffffffffffffffff1614156100ca576040517f08c3"
        "79a0000000000000000000000000000000000000000000000000000000008152"
        "6004018080602001828103825260228152602001806101c46022913960400191"
        "505060405180910390fd5b806000806101000a81548173ffffffffffffffffff"
        "ffffffffffffffffffffff021916908373ffffffffffffffffffffffffffffff"
        "ffffffffff1602179055505060ab806101196000396000f3fe608060405273ff"
        "ffffffffffffffffffffffffffffffffffffff600054167fa619486e00000000"
        "0000000000000000000000000000000000000000000000006000351415605057"
        "8060005260206000f35b3660008037600080366000845af43d6000803e600081"
        "14156070573d6000fd5b3d6000f3fea2646970667358221220d1429297349653"
        "a4918076d650332de1a1068c5f3e07c5c82360c277770b955264736f6c634300"
        "07060033496e76616c69642073696e676c65746f6e2061646472657373207072"
        "6f7669646564"
    ),
    safe_singleton=NonZeroAddress.from_hex("0xd9Db270c1B5E3Bd161E8c8503c55cEABeE709552"),
    safe_l2_singleton=NonZeroAddress.from_hex(
        "0x3E5c63644E683549055b9Be8653de26E0B4CD36E"
    ),
    safe_to_l2_setup=Address.zero(),
    fallback_handler=Address.from_hex("0xf48f2B2d2a534e402487b3ee7C18c33Aec0Fe5e4"),
)


class SafeVariant(Enum):
    SAFE = 1
    SAFE_L2 = 2


class Explorer:
    """A block explorer linking to the `createProxyWithNonce` write form."""

    def __init__(self, url: str, selector: str) -> None:
        self.url = url
        self.selector = selector

    @classmethod
    def etherscan(cls, url: str) -> "Explorer":
        return cls(url, "#writeContract#F3")

    @classmethod
    def blockscout(cls, url: str) -> "Explorer":
        return cls(url, "?tab=read_write_contract#0x1688f0b9")

    def create_proxy_with_nonce_url(self, proxy_factory: Address) -> str:
        return f"{self.url}/address/{proxy_factory}{self.selector}"


@dataclasses.dataclass(frozen=True)
class Chain:
    chain_id: int
    name: str
    deployment: Deployment
    variant: SafeVariant
    explorer: Explorer

    @property
    def singleton(self) -> NonZeroAddress:
        if self.variant is SafeVariant.SAFE:
            return self.deployment.safe_singleton
        return self.deployment.safe_l2_singleton


def _chain(
    chain_id: int,
    name: str,
    explorer: Explorer,
    variant: SafeVariant = SafeVariant.SAFE_L2,
    deployment: Deployment = SAFE_V1_4_1,
) -> Chain:
    return Chain(chain_id, name, deployment, variant, explorer)


CHAINS: dict[int, Chain] = {
    chain.chain_id: chain
    for chain in [
        _chain(1, "eth", Explorer.etherscan("https://etherscan.io"), SafeVariant.SAFE),
        _chain(10, "oeth", Explorer.etherscan("https://optimistic.etherscan.io")),
        _chain(56, "bnb", Explorer.etherscan("https://bscscan.com")),
        _chain(100, "gno", Explorer.etherscan("https://gnosisscan.io")),
        _chain(130, "unichain", Explorer.etherscan("https://uniscan.xyz")),
        _chain(137, "matic", Explorer.etherscan("https://polygonscan.com")),
        _chain(146, "sonic", Explorer.etherscan("https://sonicscan.org")),
        _chain(
            196,
            "xlayer",
            Explorer(
                "https://www.oklink.com/xlayer", "/contract#category=write&id=2"
            ),
        ),
        _chain(
            480,
            "wc",
            Explorer.blockscout("https://worldchain-mainnet.explorer.alchemy.com"),
        ),
        _chain(1101, "zkevm", Explorer.etherscan("https://zkevm.polygonscan.com")),
        _chain(5000, "mnt", Explorer.etherscan("https://mantlescan.xyz")),
        _chain(8453, "base", Explorer.etherscan("https://basescan.org")),
        _chain(
            10200,
            "chiado",
            Explorer.blockscout("https://gnosis-chiado.blockscout.com"),
            deployment=SAFE_V1_3_0,
        ),
        _chain(42161, "arb1", Explorer.etherscan("https://arbiscan.io")),
        _chain(42220, "celo", Explorer.blockscout("https://explorer.celo.org/mainnet")),
        _chain(
            43114,
            "avax",
            Explorer(
                "https://snowtrace.io", "/contract/43114/writeContract?chainid=43114#F3"
            ),
        ),
        _chain(57073, "ink", Explorer.blockscout("https://explorer.inkonchain.com")),
        _chain(59144, "linea", Explorer.etherscan("https://lineascan.build")),
        _chain(80094, "berachain", Explorer.etherscan("https://berascan.com")),
        _chain(81457, "blast", Explorer.etherscan("https://blastscan.io")),
        _chain(84532, "basesep", Explorer.etherscan("https://sepolia.basescan.org")),
        _chain(534352, "scr", Explorer.etherscan("https://scrollscan.com")),
        _chain(11155111, "sep", Explorer.etherscan("https://sepolia.etherscan.io")),
        _chain(1313161554, "aurora", Explorer.blockscout("https://aurorascan.dev")),
    ]
}

CHAIN_NAMES: dict[str, int] = {chain.name: chain_id for chain_id, chain in CHAINS.items()}

# zkSync Era derives contract addresses differently from CREATE2.
UNSUPPORTED_CHAINS: dict[int, str] = {324: "zkSync Era"}
CHAIN_NAMES["zksync"] = 324


def parse_chain_id(text: str) -> int:
    """Parse a chain short name, decimal ID or `0x`-prefixed hex ID."""
    if text in CHAIN_NAMES:
        return CHAIN_NAMES[text]
    if text.startswith(("0x", "0X")):
        return int(text[2:], 16)
    return int(text, 10)


def fetch_chain(chain_id: int) -> Optional[Chain]:
    return CHAINS.get(chain_id)
