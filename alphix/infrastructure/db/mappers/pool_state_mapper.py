from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from alphix.domain.entities.fee import FeeState, PoolParams
from alphix.domain.entities.pool import Pool, PoolConfig, PoolKey, PoolStatus, ProtocolSettings
from alphix.domain.entities.rehypothecation import (
    CurrencyLedger,
    JitPosition,
    ReHypothecationConfig,
    VaultState,
)


def parse_uint(value: int | str | Decimal | None) -> int:
    if value is None:
        raise ValueError("Missing integer value.")
    if isinstance(value, bool):
        raise ValueError("Unsupported integer value type.")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("Empty integer string.")
        parsed = int(raw)
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError("Decimal value must be integral.")
        parsed = int(value)
    else:
        raise ValueError("Unsupported integer value type.")

    if parsed < 0:
        raise ValueError("Stored amount must be non-negative.")
    return parsed


def map_row_to_protocol_settings(row: Mapping[str, Any]) -> ProtocolSettings:
    return ProtocolSettings(
        global_max_adj_rate=parse_uint(row["global_max_adj_rate"]),
        paused=bool(row["paused"]),
        pool_id=row["pool_id"],
    )


def map_row_to_pool(row: Mapping[str, Any]) -> Pool:
    return Pool(
        pool_id=row["pool_id"],
        key=PoolKey(
            currency0=row["currency0"],
            currency1=row["currency1"],
            fee=int(row["fee"]),
            tick_spacing=int(row["tick_spacing"]),
            hooks=row["hooks"],
        ),
        config=PoolConfig(
            initial_fee=int(row["initial_fee"]),
            initial_target_ratio=parse_uint(row["initial_target_ratio"]),
            pool_type=row["pool_type"],
            is_configured=bool(row["is_configured"]),
        ),
        params=PoolParams(
            min_fee=int(row["min_fee"]),
            max_fee=int(row["max_fee"]),
            base_max_fee_delta=int(row["base_max_fee_delta"]),
            lookback_period=int(row["lookback_period"]),
            min_period=int(row["min_period"]),
            ratio_tolerance=parse_uint(row["ratio_tolerance"]),
            linear_slope=parse_uint(row["linear_slope"]),
            max_current_ratio=parse_uint(row["max_current_ratio"]),
            lower_side_factor=parse_uint(row["lower_side_factor"]),
            upper_side_factor=parse_uint(row["upper_side_factor"]),
        ),
        fee_state=FeeState(
            current_fee=int(row["current_fee"]),
            current_target_ratio=parse_uint(row["current_target_ratio"]),
            last_adjustment_timestamp=int(row["last_adjustment_timestamp"]),
        ),
        status=PoolStatus(row["status"]),
    )


def map_pool_to_params(pool: Pool) -> dict[str, Any]:
    params = pool.params
    return {
        "pool_id": pool.pool_id,
        "currency0": pool.key.currency0,
        "currency1": pool.key.currency1,
        "fee": pool.key.fee,
        "tick_spacing": pool.key.tick_spacing,
        "hooks": pool.key.hooks,
        "initial_fee": pool.config.initial_fee,
        "initial_target_ratio": str(pool.config.initial_target_ratio),
        "pool_type": pool.config.pool_type,
        "is_configured": pool.config.is_configured,
        "min_fee": params.min_fee,
        "max_fee": params.max_fee,
        "base_max_fee_delta": params.base_max_fee_delta,
        "lookback_period": params.lookback_period,
        "min_period": params.min_period,
        "ratio_tolerance": str(params.ratio_tolerance),
        "linear_slope": str(params.linear_slope),
        "max_current_ratio": str(params.max_current_ratio),
        "lower_side_factor": str(params.lower_side_factor),
        "upper_side_factor": str(params.upper_side_factor),
        "current_fee": pool.fee_state.current_fee,
        "current_target_ratio": str(pool.fee_state.current_target_ratio),
        "last_adjustment_timestamp": pool.fee_state.last_adjustment_timestamp,
        "status": pool.status.value,
    }


def _map_row_to_ledger(row: Mapping[str, Any]) -> CurrencyLedger:
    return CurrencyLedger(
        currency=row["currency"],
        yield_source=row["yield_source"],
        last_accounted_assets=parse_uint(row["last_accounted_assets"]),
        accumulated_tax=parse_uint(row["accumulated_tax"]),
    )


def map_rows_to_vault(
    vault_row: Mapping[str, Any],
    currency_rows: Iterable[Mapping[str, Any]],
    share_rows: Iterable[Mapping[str, Any]],
) -> VaultState:
    ledgers = {int(row["slot"]): _map_row_to_ledger(row) for row in currency_rows}
    if set(ledgers) != {0, 1}:
        raise ValueError(f"Vault {vault_row['pool_id']} is missing currency ledgers.")

    jit_position = None
    if vault_row["jit_amount0"] is not None or vault_row["jit_amount1"] is not None:
        jit_position = JitPosition(
            amount0=parse_uint(vault_row["jit_amount0"] or 0),
            amount1=parse_uint(vault_row["jit_amount1"] or 0),
        )

    return VaultState(
        pool_id=vault_row["pool_id"],
        config=ReHypothecationConfig(
            tick_lower=int(vault_row["tick_lower"]),
            tick_upper=int(vault_row["tick_upper"]),
            yield_tax_pips=int(vault_row["yield_tax_pips"]),
            yield_treasury=vault_row["yield_treasury"],
        ),
        total_supply=parse_uint(vault_row["total_supply"]),
        currency0=ledgers[0],
        currency1=ledgers[1],
        balances={row["holder"]: parse_uint(row["shares"]) for row in share_rows},
        jit_position=jit_position,
    )


def map_vault_to_params(vault: VaultState) -> dict[str, Any]:
    jit = vault.jit_position
    return {
        "pool_id": vault.pool_id,
        "tick_lower": vault.config.tick_lower,
        "tick_upper": vault.config.tick_upper,
        "yield_tax_pips": vault.config.yield_tax_pips,
        "yield_treasury": vault.config.yield_treasury,
        "total_supply": str(vault.total_supply),
        "jit_amount0": str(jit.amount0) if jit is not None else None,
        "jit_amount1": str(jit.amount1) if jit is not None else None,
    }


def map_ledger_to_params(pool_id: str, slot: int, ledger: CurrencyLedger) -> dict[str, Any]:
    return {
        "pool_id": pool_id,
        "slot": slot,
        "currency": ledger.currency,
        "yield_source": ledger.yield_source,
        "last_accounted_assets": str(ledger.last_accounted_assets),
        "accumulated_tax": str(ledger.accumulated_tax),
    }
