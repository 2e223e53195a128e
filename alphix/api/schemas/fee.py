from __future__ import annotations

from pydantic import BaseModel, Field

from alphix.domain.entities.fee import PoolParams


class PoolParamsSchema(BaseModel):
    min_fee: int = Field(..., ge=0)
    max_fee: int = Field(..., ge=0)
    base_max_fee_delta: int = Field(..., ge=0)
    lookback_period: int = Field(..., ge=1, description="EMA window in adjustment periods.")
    min_period: int = Field(..., ge=0, description="Cooldown between adjustments in seconds.")
    ratio_tolerance: int = Field(..., ge=0, description="1e18-scaled dead band around the target.")
    linear_slope: int = Field(..., ge=0)
    max_current_ratio: int = Field(..., ge=0)
    lower_side_factor: int = Field(..., ge=0)
    upper_side_factor: int = Field(..., ge=0)

    def to_entity(self) -> PoolParams:
        return PoolParams(**self.model_dump())

    @classmethod
    def from_entity(cls, params: PoolParams) -> "PoolParamsSchema":
        return cls(
            min_fee=params.min_fee,
            max_fee=params.max_fee,
            base_max_fee_delta=params.base_max_fee_delta,
            lookback_period=params.lookback_period,
            min_period=params.min_period,
            ratio_tolerance=params.ratio_tolerance,
            linear_slope=params.linear_slope,
            max_current_ratio=params.max_current_ratio,
            lower_side_factor=params.lower_side_factor,
            upper_side_factor=params.upper_side_factor,
        )


class FeeResponse(BaseModel):
    pool_id: str
    current_fee: int
    current_target_ratio: int
    last_adjustment_timestamp: int
    next_adjustment_time: int
    global_max_adj_rate: int
    params: PoolParamsSchema


class PokeFeeRequest(BaseModel):
    current_ratio: int = Field(..., description="Observed 1e18-scaled pool ratio.")


class PokeFeeResponse(BaseModel):
    pool_id: str
    old_fee: int
    new_fee: int
    old_target_ratio: int
    new_target_ratio: int
    timestamp: int
    within_tolerance: bool


class GlobalMaxAdjRateRequest(BaseModel):
    rate: int = Field(..., description="1e18-scaled cap on the per-step adjustment rate.")


class GlobalMaxAdjRateResponse(BaseModel):
    global_max_adj_rate: int
