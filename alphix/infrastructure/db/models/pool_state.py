from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from alphix.infrastructure.db.engine import Base


# 1e18-scaled values and token amounts exceed BIGINT; they are stored as decimal text.


class ProtocolSettingsModel(Base):
    __tablename__ = "alphix_protocol"

    hook_address: Mapped[str] = mapped_column(Text, primary_key=True)
    global_max_adj_rate: Mapped[str] = mapped_column(Text, nullable=False)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pool_id: Mapped[str | None] = mapped_column(Text, nullable=True)


class PoolModel(Base):
    __tablename__ = "alphix_pools"

    pool_id: Mapped[str] = mapped_column(Text, primary_key=True)
    currency0: Mapped[str] = mapped_column(Text, nullable=False)
    currency1: Mapped[str] = mapped_column(Text, nullable=False)
    fee: Mapped[int] = mapped_column(Integer, nullable=False)
    tick_spacing: Mapped[int] = mapped_column(Integer, nullable=False)
    hooks: Mapped[str] = mapped_column(Text, nullable=False)
    initial_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    initial_target_ratio: Mapped[str] = mapped_column(Text, nullable=False)
    pool_type: Mapped[str] = mapped_column(Text, nullable=False)
    is_configured: Mapped[bool] = mapped_column(Boolean, nullable=False)
    min_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    max_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    base_max_fee_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    lookback_period: Mapped[int] = mapped_column(Integer, nullable=False)
    min_period: Mapped[int] = mapped_column(BigInteger, nullable=False)
    ratio_tolerance: Mapped[str] = mapped_column(Text, nullable=False)
    linear_slope: Mapped[str] = mapped_column(Text, nullable=False)
    max_current_ratio: Mapped[str] = mapped_column(Text, nullable=False)
    lower_side_factor: Mapped[str] = mapped_column(Text, nullable=False)
    upper_side_factor: Mapped[str] = mapped_column(Text, nullable=False)
    current_fee: Mapped[int] = mapped_column(Integer, nullable=False)
    current_target_ratio: Mapped[str] = mapped_column(Text, nullable=False)
    last_adjustment_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)


class VaultModel(Base):
    __tablename__ = "alphix_vaults"

    pool_id: Mapped[str] = mapped_column(Text, ForeignKey("alphix_pools.pool_id"), primary_key=True)
    tick_lower: Mapped[int] = mapped_column(Integer, nullable=False)
    tick_upper: Mapped[int] = mapped_column(Integer, nullable=False)
    yield_tax_pips: Mapped[int] = mapped_column(Integer, nullable=False)
    yield_treasury: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_supply: Mapped[str] = mapped_column(Text, nullable=False)
    jit_amount0: Mapped[str | None] = mapped_column(Text, nullable=True)
    jit_amount1: Mapped[str | None] = mapped_column(Text, nullable=True)


class VaultCurrencyModel(Base):
    __tablename__ = "alphix_vault_currencies"

    pool_id: Mapped[str] = mapped_column(Text, ForeignKey("alphix_vaults.pool_id"), primary_key=True)
    slot: Mapped[int] = mapped_column(Integer, primary_key=True)
    currency: Mapped[str] = mapped_column(Text, nullable=False)
    yield_source: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_accounted_assets: Mapped[str] = mapped_column(Text, nullable=False)
    accumulated_tax: Mapped[str] = mapped_column(Text, nullable=False)


class VaultShareModel(Base):
    __tablename__ = "alphix_vault_shares"

    pool_id: Mapped[str] = mapped_column(Text, ForeignKey("alphix_vaults.pool_id"), primary_key=True)
    holder: Mapped[str] = mapped_column(Text, primary_key=True)
    shares: Mapped[str] = mapped_column(Text, nullable=False)
