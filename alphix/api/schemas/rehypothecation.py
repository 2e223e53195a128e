from __future__ import annotations

from pydantic import BaseModel, Field


class SharesRequest(BaseModel):
    shares: int = Field(..., description="Vault shares to mint or burn.")


class LiquidityAmountsResponse(BaseModel):
    shares: int
    amount0: int
    amount1: int


class CollectTaxResponse(BaseModel):
    collected0: int
    collected1: int


class SetYieldSourceRequest(BaseModel):
    currency: str
    yield_source: str | None = Field(None, description="Yield source adapter address (0x...).")


class YieldSourceResponse(BaseModel):
    currency: str
    yield_source: str


class TickRangeRequest(BaseModel):
    tick_lower: int
    tick_upper: int


class TickRangeResponse(BaseModel):
    tick_lower: int
    tick_upper: int


class YieldTaxRequest(BaseModel):
    yield_tax_pips: int = Field(..., description="Share of yield taken as tax, in pips (1e6 = 100%).")


class YieldTaxResponse(BaseModel):
    yield_tax_pips: int


class YieldTreasuryRequest(BaseModel):
    yield_treasury: str | None = None


class YieldTreasuryResponse(BaseModel):
    yield_treasury: str


class CurrencyResponse(BaseModel):
    currency: str
    yield_source: str | None
    amount_in_yield_source: int
    accumulated_tax: int


class VaultResponse(BaseModel):
    pool_id: str
    tick_lower: int
    tick_upper: int
    yield_tax_pips: int
    yield_treasury: str | None
    total_supply: int
    currency0: CurrencyResponse
    currency1: CurrencyResponse
    caller_balance: int | None = None
