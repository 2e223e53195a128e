from __future__ import annotations

from dataclasses import dataclass


BEFORE_INITIALIZE = "beforeInitialize"
AFTER_INITIALIZE = "afterInitialize"
BEFORE_ADD_LIQUIDITY = "beforeAddLiquidity"
AFTER_ADD_LIQUIDITY = "afterAddLiquidity"
BEFORE_REMOVE_LIQUIDITY = "beforeRemoveLiquidity"
AFTER_REMOVE_LIQUIDITY = "afterRemoveLiquidity"
BEFORE_SWAP = "beforeSwap"
AFTER_SWAP = "afterSwap"


@dataclass(frozen=True)
class ModifyLiquidityParams:
    tick_lower: int
    tick_upper: int
    liquidity_delta: int


@dataclass(frozen=True)
class SwapParams:
    zero_for_one: bool
    amount_specified: int
    sqrt_price_limit_x96: int


@dataclass(frozen=True)
class BeforeSwapOutput:
    selector: str
    fee_override: int
