"""Minimal contract ABIs, just the functions the handlers read."""


def _view(name: str, inputs: list[tuple[str, str]], outputs: list[str]) -> dict:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": "", "type": t} for t in outputs],
    }


ERC20_ABI = [
    _view("decimals", [], ["uint8"]),
    _view("totalSupply", [], ["uint256"]),
    _view("balanceOf", [("owner", "address")], ["uint256"]),
]

UNISWAP_V2_PAIR_ABI = [
    _view("token0", [], ["address"]),
    _view("token1", [], ["address"]),
    _view("getReserves", [], ["uint112", "uint112", "uint32"]),
]

UNISWAP_V3_POOL_ABI = [
    _view("token0", [], ["address"]),
    _view("token1", [], ["address"]),
    _view("fee", [], ["uint24"]),
    _view(
        "slot0",
        [],
        ["uint160", "int24", "uint16", "uint16", "uint16", "uint8", "bool"],
    ),
]

POSITION_MANAGER_ABI = [
    _view("balanceOf", [("owner", "address")], ["uint256"]),
    _view("tokenOfOwnerByIndex", [("owner", "address"), ("index", "uint256")], ["uint256"]),
    _view(
        "positions",
        [("tokenId", "uint256")],
        [
            "uint96",  # nonce
            "address",  # operator
            "address",  # token0
            "address",  # token1
            "uint24",  # fee
            "int24",  # tickLower
            "int24",  # tickUpper
            "uint128",  # liquidity
            "uint256",  # feeGrowthInside0LastX128
            "uint256",  # feeGrowthInside1LastX128
            "uint128",  # tokensOwed0
            "uint128",  # tokensOwed1
        ],
    ),
]

# QuoterV2 - called via eth_call, so declared view here
QUOTER_V2_ABI = [
    {
        "name": "quoteExactInputSingle",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "tokenIn", "type": "address"},
                    {"name": "tokenOut", "type": "address"},
                    {"name": "amountIn", "type": "uint256"},
                    {"name": "fee", "type": "uint24"},
                    {"name": "sqrtPriceLimitX96", "type": "uint160"},
                ],
            }
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96After", "type": "uint160"},
            {"name": "initializedTicksCrossed", "type": "uint32"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
]

ERC4626_ABI = [
    _view("asset", [], ["address"]),
    _view("convertToAssets", [("shares", "uint256")], ["uint256"]),
]

BALANCER_VAULT_ABI = [
    _view("getPoolTokens", [("poolId", "bytes32")], ["address[]", "uint256[]", "uint256"]),
    _view("getPool", [("poolId", "bytes32")], ["address", "uint8"]),
]

WEIGHTED_POOL_ABI = [
    _view("getNormalizedWeights", [], ["uint256[]"]),
]

ISLAND_ABI = [
    _view("pool", [], ["address"]),
    _view("getUnderlyingBalances", [], ["uint256", "uint256"]),
]

REWARD_VAULT_ABI = [
    _view("stakeToken", [], ["address"]),
]

PRICE_FEED_ABI = [
    _view("latestAnswer", [], ["int256"]),
    _view("decimals", [], ["uint8"]),
]
