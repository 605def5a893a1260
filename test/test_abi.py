from hexbytes import HexBytes

from safe_vanity.abi import (
    encode_create_proxy_with_nonce,
    encode_safe_setup,
    encode_safe_to_l2_setup,
    proxy_init_code_hash,
    setup_call,
)
from safe_vanity.address import Address
from safe_vanity.chains import SAFE_V1_3_0, SAFE_V1_4_1
from safe_vanity.models import Account, SafeToL2Setup

OWNERS = [
    Address.from_hex("aa" * 20),
    Address.from_hex("bb" * 20),
    Address.from_hex("cc" * 20),
]


def words(*lines: str) -> HexBytes:
    return HexBytes("".join(line.strip() for line in lines))


def test_encode_safe_setup_without_l2_setup():
    to, data = setup_call(None)
    initializer = encode_safe_setup(
        owners=OWNERS,
        threshold=2,
        to=to,
        data=data,
        fallback_handler=Address.from_hex("33" * 20),
        payment_receiver=Address.zero(),
    )
    assert initializer == words(
        "b63e800d",
        "0000000000000000000000000000000000000000000000000000000000000100",
        "0000000000000000000000000000000000000000000000000000000000000002",
        "0000000000000000000000000000000000000000000000000000000000000000",
        "0000000000000000000000000000000000000000000000000000000000000180",
        "0000000000000000000000003333333333333333333333333333333333333333",
        "0000000000000000000000000000000000000000000000000000000000000000",
        "0000000000000000000000000000000000000000000000000000000000000000",
        "0000000000000000000000000000000000000000000000000000000000000000",
        "0000000000000000000000000000000000000000000000000000000000000003",
        "000000000000000000000000aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa",
        "000000000000000000000000bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb",
        "000000000000000000000000cccccccccccccccccccccccccccccccccccccccc",
        "0000000000000000000000000000000000000000000000000000000000000000",
    )


def test_encode_safe_setup_with_l2_setup():
    account = Account(
        owners=tuple(OWNERS),
        threshold=2,
        setup=SafeToL2Setup(
            address="0x" + "11" * 20,
            l2_singleton="0x" + "22" * 20,
        ),
        fallback_handler="0x" + "ff" * 20,
    )
    assert account.initializer() == words(
        "b63e800d",
        "0000000000000000000000000000000000000000000000000000000000000100",
        "0000000000000000000000000000000000000000000000000000000000000002",
        "0000000000000000000000001111111111111111111111111111111111111111",
        "0000000000000000000000000000000000000000000000000000000000000180",
        "000000000000000000000000ffffffffffffffffffffffffffffffffffffffff",
        "0000000000000000000000000000000000000000000000000000000000000000",
        "0000000000000000000000000000000000000000000000000000000000000000",
        "0000000000000000000000000000000000000000000000000000000000000000",
        "0000000000000000000000000000000000000000000000000000000000000003",
        "000000000000000000000000aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa",
        "000000000000000000000000bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb",
        "000000000000000000000000cccccccccccccccccccccccccccccccccccccccc",
        "0000000000000000000000000000000000000000000000000000000000000024",
        "fe51f643",
        "0000000000000000000000002222222222222222222222222222222222222222",
        "00000000000000000000000000000000000000000000000000000000",
    )


def test_encode_safe_setup_identifier_is_payment_receiver():
    initializer = encode_safe_setup(
        owners=OWNERS[:1],
        threshold=1,
        to=Address.zero(),
        data=b"",
        fallback_handler=Address.zero(),
        payment_receiver=Address.from_hex("0x5afe7A11E7000000000000000000000000000000"),
    )
    payment_receiver_word = initializer[4 + 7 * 32 : 4 + 8 * 32]
    assert payment_receiver_word == HexBytes(
        "0x0000000000000000000000005afe7a11e7000000000000000000000000000000"
    )


def test_data_offset_follows_owners():
    for count in range(1, 6):
        owners = [Address(bytes(19) + bytes([i + 1])) for i in range(count)]
        initializer = encode_safe_setup(
            owners=owners,
            threshold=1,
            to=Address.zero(),
            data=b"",
            fallback_handler=Address.zero(),
            payment_receiver=Address.zero(),
        )
        owners_offset = int.from_bytes(initializer[4 : 4 + 32], "big")
        data_offset = int.from_bytes(initializer[4 + 3 * 32 : 4 + 4 * 32], "big")
        assert owners_offset == 0x100
        assert data_offset == 0x120 + 0x20 * count


def test_head_unaffected_by_fallback_and_identifier():
    def encode(fallback: Address, identifier: Address) -> HexBytes:
        return encode_safe_setup(
            owners=OWNERS,
            threshold=2,
            to=Address.zero(),
            data=b"",
            fallback_handler=fallback,
            payment_receiver=identifier,
        )

    base = encode(Address.zero(), Address.zero())
    other = encode(Address.from_hex("12" * 20), Address.from_hex("34" * 20))
    # selector, owners offset, threshold, to, data offset
    assert base[: 4 + 4 * 32] == other[: 4 + 4 * 32]
    # owners array and data
    assert base[4 + 8 * 32 :] == other[4 + 8 * 32 :]
    assert base != other


def test_encode_safe_to_l2_setup():
    data = encode_safe_to_l2_setup(Address.from_hex("44" * 20))
    assert data == words(
        "fe51f643",
        "0000000000000000000000004444444444444444444444444444444444444444",
    )


def test_encode_create_proxy_with_nonce():
    calldata = encode_create_proxy_with_nonce(
        singleton=Address.from_hex("22" * 20),
        initializer=HexBytes("0xb63e800d"),
        salt_nonce=bytes([0xEE] * 32),
    )
    assert calldata == words(
        "1688f0b9",
        "0000000000000000000000002222222222222222222222222222222222222222",
        "0000000000000000000000000000000000000000000000000000000000000060",
        "eeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
        "0000000000000000000000000000000000000000000000000000000000000004",
        "b63e800d00000000000000000000000000000000000000000000000000000000",
    )


def test_proxy_init_code_hash():
    assert proxy_init_code_hash(
        SAFE_V1_4_1.proxy_init_code, SAFE_V1_4_1.safe_singleton
    ) == HexBytes("0x76733d705f71b79841c0ee960a0ca880f779cde7ef446c989e6d23efc0a4adfb")
    assert proxy_init_code_hash(
        SAFE_V1_3_0.proxy_init_code, SAFE_V1_3_0.safe_singleton
    ) == HexBytes("0x56e3081a3d1bb38ed4eed1a39f7729c3cc77c7825794c15bbf326f3047fd779c")
