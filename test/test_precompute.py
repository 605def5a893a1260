import pytest
from hexbytes import HexBytes

from safe_vanity.address import Address
from safe_vanity.chains import SAFE_V1_3_0, SAFE_V1_4_1
from safe_vanity.deployment import Safe
from safe_vanity.models import (
    ConfigurationError,
    Transaction,
    make_configuration,
)


def test_missing_l2_singleton():
    with pytest.raises(ConfigurationError):
        make_configuration(
            proxy_factory=SAFE_V1_4_1.proxy_factory,
            proxy_init_code=SAFE_V1_4_1.proxy_init_code,
            singleton=SAFE_V1_4_1.safe_singleton,
            owners=["0x" + "aa" * 20],
            threshold=1,
            safe_to_l2_setup=SAFE_V1_4_1.safe_to_l2_setup,
            l2_singleton=None,
        )


def test_missing_safe_to_l2_setup():
    with pytest.raises(ConfigurationError):
        make_configuration(
            proxy_factory=SAFE_V1_4_1.proxy_factory,
            proxy_init_code=SAFE_V1_4_1.proxy_init_code,
            singleton=SAFE_V1_4_1.safe_singleton,
            owners=["0x" + "aa" * 20],
            threshold=1,
            l2_singleton=SAFE_V1_4_1.safe_l2_singleton,
        )


@pytest.mark.parametrize("threshold", [0, 3])
def test_invalid_threshold(threshold: int):
    with pytest.raises(ConfigurationError, match="Threshold"):
        make_configuration(
            proxy_factory=SAFE_V1_4_1.proxy_factory,
            proxy_init_code=SAFE_V1_4_1.proxy_init_code,
            singleton=SAFE_V1_4_1.safe_singleton,
            owners=["0x" + "aa" * 20, "0x" + "bb" * 20],
            threshold=threshold,
        )


def test_invalid_owners():
    for owners in (
        [],
        ["0x" + "00" * 20],
        ["0x" + "aa" * 20, "0x" + "AA" * 20],
        ["0x0000000000000000000000000000000000000001"],
        ["0xnotanaddress"],
    ):
        with pytest.raises(ConfigurationError):
            make_configuration(
                proxy_factory=SAFE_V1_4_1.proxy_factory,
                proxy_init_code=SAFE_V1_4_1.proxy_init_code,
                singleton=SAFE_V1_4_1.safe_singleton,
                owners=owners,
                threshold=1,
            )


def test_zero_proxy_factory():
    with pytest.raises(ConfigurationError):
        make_configuration(
            proxy_factory="0x" + "00" * 20,
            proxy_init_code=SAFE_V1_4_1.proxy_init_code,
            singleton=SAFE_V1_4_1.safe_singleton,
            owners=["0x" + "aa" * 20],
            threshold=1,
        )


def test_happy_path():
    owner = "0xdeadbeef00000000000000000000000000000000"
    params = dict(
        proxy_factory=SAFE_V1_4_1.proxy_factory,
        proxy_init_code=SAFE_V1_4_1.proxy_init_code,
        singleton=SAFE_V1_4_1.safe_l2_singleton,
        owners=[owner],
        threshold=1,
        fallback_handler=SAFE_V1_4_1.fallback_handler,
    )
    safe = Safe(make_configuration(**params))
    assert str(safe.creation_address()) == "0x1B751A15d6aEd26aC3e2A5320548F390ccE76ED2"

    params.update(singleton=SAFE_V1_4_1.safe_singleton)
    safe = Safe(make_configuration(**params))
    assert str(safe.creation_address()) == "0x09e5830Fdf94340474B54fCDE0F3A2d408Df56DE"

    safe.set_salt_nonce(123)
    assert str(safe.creation_address()) == "0x06bA263c7Fd42Ac736e7b782540693696Cf7D9Ec"


def test_v1_4_1_mainnet_deployment():
    # https://etherscan.io/tx/0x764675dc513abc36844acf38ac0ef783b0c3e900f8a7d4695bff734e1b0b681d
    configuration = make_configuration(
        proxy_factory=SAFE_V1_4_1.proxy_factory,
        proxy_init_code=SAFE_V1_4_1.proxy_init_code,
        singleton=SAFE_V1_4_1.safe_singleton,
        owners=[
            "0xBF51A8D5ec360F69f9d852Bad1df81585a0b4de2",
            "0x84B2D6d9C43Ee780Dd3AA5a7f68aE2A5f45F8206",
        ],
        threshold=2,
        safe_to_l2_setup=SAFE_V1_4_1.safe_to_l2_setup,
        l2_singleton=SAFE_V1_4_1.safe_l2_singleton,
        fallback_handler=SAFE_V1_4_1.fallback_handler,
        identifier="0x5afe7A11E7000000000000000000000000000000",
    )
    safe = Safe(configuration)

    def zero(nonce: memoryview) -> None:
        nonce[:] = bytes(32)

    safe.update_salt_nonce(zero)
    assert safe.creation_address() == Address.from_hex(
        "0xe47C47CDa5c532A55b930467691BbDB24Ce08bDA"
    )


def test_v1_3_0_mainnet_deployment():
    # https://etherscan.io/tx/0x7b0615b648cb5b9ee366cd22af4e0e40fe90d67c0e140c6efdaabb20b3033a63
    configuration = make_configuration(
        proxy_factory=SAFE_V1_3_0.proxy_factory,
        proxy_init_code=SAFE_V1_3_0.proxy_init_code,
        singleton=SAFE_V1_3_0.safe_singleton,
        owners=[
            "0x5c8c76f2e990f194462dc5f8a8c76ba16966ed42",
            "0x703f28830eeaaad54e786a839f6602ca098016a5",
            "0x0e706a98f414f49a412107641c0820b0153ff5dc",
            "0x173286fafabea063eeb3726ee5efd4ff414057b9",
            "0x2f2806e8b288428f23707a69faa60f52bc565c17",
            "0x4507cfb4b077d5dbddd520c701e30173d5b59fad",
        ],
        threshold=3,
        fallback_handler=SAFE_V1_3_0.fallback_handler,
    )
    safe = Safe(configuration)
    safe.set_salt_nonce(
        HexBytes("0x0000000000000000000000000000000000000000000000000000018bbf9209f3")
    )
    assert safe.creation_address() == Address.from_hex(
        "0x5836152812568244760ba356b5f3838aa5b672e0"
    )


def test_transaction():
    configuration = make_configuration(
        proxy_factory="0x" + "11" * 20,
        proxy_init_code="0x",
        singleton="0x" + "22" * 20,
        owners=["0x" + "aa" * 20, "0x" + "bb" * 20, "0x" + "cc" * 20],
        threshold=2,
        fallback_handler="0x" + "33" * 20,
    )
    safe = Safe(configuration)

    def fill(nonce: memoryview) -> None:
        nonce[:] = bytes([0xEE] * 32)

    safe.update_salt_nonce(fill)
    assert safe.salt_nonce() == bytes([0xEE] * 32)
    assert safe.transaction() == Transaction(
        to=Address.from_hex("11" * 20),
        calldata=HexBytes(
            "0x1688f0b9"
            "0000000000000000000000002222222222222222222222222222222222222222"
            "0000000000000000000000000000000000000000000000000000000000000060"
            "eeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
            "00000000000000000000000000000000000000000000000000000000000001a4"
            "b63e800d00000000000000000000000000000000000000000000000000000000"
            "0000010000000000000000000000000000000000000000000000000000000000"
            "0000000200000000000000000000000000000000000000000000000000000000"
            "0000000000000000000000000000000000000000000000000000000000000000"
            "0000018000000000000000000000000033333333333333333333333333333333"
            "3333333300000000000000000000000000000000000000000000000000000000"
            "0000000000000000000000000000000000000000000000000000000000000000"
            "0000000000000000000000000000000000000000000000000000000000000000"
            "0000000000000000000000000000000000000000000000000000000000000000"
            "00000003000000000000000000000000aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
            "aaaaaaaa000000000000000000000000bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
            "bbbbbbbb000000000000000000000000cccccccccccccccccccccccccccccccc"
            "cccccccc00000000000000000000000000000000000000000000000000000000"
            "0000000000000000000000000000000000000000000000000000000000000000"
        ),
    )


def test_creation_address_is_deterministic():
    params = dict(
        proxy_factory=SAFE_V1_4_1.proxy_factory,
        proxy_init_code=SAFE_V1_4_1.proxy_init_code,
        singleton=SAFE_V1_4_1.safe_singleton,
        owners=["0x" + "aa" * 20],
        threshold=1,
    )
    first = Safe(make_configuration(**params))
    second = Safe(make_configuration(**params))
    for safe in (first, second):
        safe.set_salt_nonce(0xC0FFEE)
    assert first.creation_address() == second.creation_address()
    assert first.initializer() == second.initializer()

    clone = first.copy()
    clone.set_salt_nonce(1)
    assert clone.creation_address() != first.creation_address()
    assert first.salt_nonce() == (0xC0FFEE).to_bytes(32, "big")


def test_invalid_salt_nonce():
    safe = Safe(
        make_configuration(
            proxy_factory=SAFE_V1_4_1.proxy_factory,
            proxy_init_code=SAFE_V1_4_1.proxy_init_code,
            singleton=SAFE_V1_4_1.safe_singleton,
            owners=["0x" + "aa" * 20],
            threshold=1,
        )
    )
    with pytest.raises(ValueError):
        safe.set_salt_nonce(b"\x01" * 31)
    with pytest.raises(OverflowError):
        safe.set_salt_nonce(2**256)


def test_failed_salt_nonce_update_keeps_salt_consistent():
    configuration = make_configuration(
        proxy_factory=SAFE_V1_4_1.proxy_factory,
        proxy_init_code=SAFE_V1_4_1.proxy_init_code,
        singleton=SAFE_V1_4_1.safe_singleton,
        owners=["0x" + "aa" * 20],
        threshold=1,
    )
    safe = Safe(configuration)

    def partial(nonce: memoryview) -> None:
        nonce[0] = 0x42
        raise RuntimeError("interrupted")

    with pytest.raises(RuntimeError):
        safe.update_salt_nonce(partial)
    assert safe.salt_nonce() == b"\x42" + bytes(31)

    fresh = Safe(configuration)
    fresh.set_salt_nonce(safe.salt_nonce())
    assert safe.creation_address() == fresh.creation_address()


def test_odd_length_init_code():
    with pytest.raises(ConfigurationError, match="Odd number of hex digits"):
        make_configuration(
            proxy_factory=SAFE_V1_4_1.proxy_factory,
            proxy_init_code="0x123",
            singleton=SAFE_V1_4_1.safe_singleton,
            owners=["0x" + "aa" * 20],
            threshold=1,
        )
