DEFAULT_CHAIN_ID = 1
MAX_PREFIX_NIBBLES = 40
NONCE_LENGTH = 32

# setup(address[],uint256,address,bytes,address,address,uint256,address)
SAFE_SETUP_FUNC_SELECTOR = "0xb63e800d"
SAFE_SETUP_FUNC_TYPES = (
    "address[]",
    "uint256",
    "address",
    "bytes",
    "address",
    "address",
    "uint256",
    "address",
)

# setupToL2(address)
SAFE_TO_L2_SETUP_FUNC_SELECTOR = "0xfe51f643"
SAFE_TO_L2_SETUP_FUNC_TYPES = ("address",)

# createProxyWithNonce(address,bytes,uint256)
CREATE_PROXY_WITH_NONCE_FUNC_SELECTOR = "0x1688f0b9"
CREATE_PROXY_WITH_NONCE_FUNC_TYPES = (
    "address",
    "bytes",
    "uint256",
)

SYMBOL_CHECK = "✔"
SYMBOL_WARNING = "⚠"
