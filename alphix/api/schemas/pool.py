from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from alphix.api.schemas.fee import PoolParamsSchema


class PoolKeySchema(BaseModel):
    currency0: str = Field(..., description="Lower-sorted currency address (0x...).")
    currency1: str = Field(..., description="Higher-sorted currency address (0x...).")
    fee: int = Field(..., ge=0, description="Host fee field; dynamic-fee pools carry the dynamic flag.")
    tick_spacing: int = Field(..., gt=0)
    hooks: str = Field(..., description="Hook address serving the pool.")


class InitializePoolRequest(BaseModel):
    key: PoolKeySchema
    initial_fee: int = Field(..., ge=0, description="Fee in hundredths of a bip.")
    initial_target_ratio: int = Field(..., gt=0, description="1e18-scaled target ratio.")
    pool_type: Literal["stable", "standard", "volatile"]
    sqrt_price_x96: int = Field(..., gt=0)
    params: PoolParamsSchema | None = Field(None, description="Defaults to the pool type's parameters.")


class PoolResponse(BaseModel):
    pool_id: str
    pool_type: str
    status: str
    lifecycle_state: str
    current_fee: int
    current_target_ratio: int
    last_adjustment_timestamp: int


class ProtocolPauseResponse(BaseModel):
    paused: bool
