from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from sqlalchemy import text

from alphix.domain.entities.pool import Pool, ProtocolSettings
from alphix.domain.entities.rehypothecation import VaultState
from alphix.infrastructure.db.mappers.pool_state_mapper import (
    map_ledger_to_params,
    map_pool_to_params,
    map_row_to_pool,
    map_row_to_protocol_settings,
    map_rows_to_vault,
    map_vault_to_params,
)


TResult = TypeVar("TResult")

logger = logging.getLogger(__name__)


class SqlPoolStateRepository:
    """
    Pool, fee and vault state in SQL.

    Outside ``execute_in_transaction`` every call runs on its own connection;
    inside it, the callback receives a repository bound to the open
    transaction and a raised exception rolls the whole unit back.
    """

    def __init__(self, engine, *, hook_address: str, default_global_max_adj_rate: int, connection=None):
        self._engine = engine
        self._hook_address = hook_address
        self._default_global_max_adj_rate = default_global_max_adj_rate
        self._connection = connection

    def execute_in_transaction(self, fn: Callable[["SqlPoolStateRepository"], TResult]) -> TResult:
        if self._connection is not None:
            return fn(self)
        with self._engine.begin() as conn:
            bound = SqlPoolStateRepository(
                self._engine,
                hook_address=self._hook_address,
                default_global_max_adj_rate=self._default_global_max_adj_rate,
                connection=conn,
            )
            return fn(bound)

    @contextmanager
    def _conn(self) -> Iterator:
        if self._connection is not None:
            yield self._connection
            return
        with self._engine.begin() as conn:
            yield conn

    def get_protocol_settings(self) -> ProtocolSettings:
        sql = """
            SELECT global_max_adj_rate, paused, pool_id
            FROM alphix_protocol
            WHERE hook_address = :hook_address
            LIMIT 1
        """
        with self._conn() as conn:
            row = conn.execute(text(sql), {"hook_address": self._hook_address}).mappings().first()
        if row is None:
            return ProtocolSettings(
                global_max_adj_rate=self._default_global_max_adj_rate,
                paused=False,
                pool_id=None,
            )
        return map_row_to_protocol_settings(row)

    def save_protocol_settings(self, *, settings: ProtocolSettings) -> None:
        sql = """
            INSERT INTO alphix_protocol (hook_address, global_max_adj_rate, paused, pool_id)
            VALUES (:hook_address, :global_max_adj_rate, :paused, :pool_id)
            ON CONFLICT (hook_address) DO UPDATE SET
                global_max_adj_rate = excluded.global_max_adj_rate,
                paused = excluded.paused,
                pool_id = excluded.pool_id
        """
        params = {
            "hook_address": self._hook_address,
            "global_max_adj_rate": str(settings.global_max_adj_rate),
            "paused": settings.paused,
            "pool_id": settings.pool_id,
        }
        with self._conn() as conn:
            conn.execute(text(sql), params)

    def get_pool(self, *, pool_id: str) -> Pool | None:
        sql = """
            SELECT pool_id, currency0, currency1, fee, tick_spacing, hooks,
                   initial_fee, initial_target_ratio, pool_type, is_configured,
                   min_fee, max_fee, base_max_fee_delta, lookback_period, min_period,
                   ratio_tolerance, linear_slope, max_current_ratio,
                   lower_side_factor, upper_side_factor,
                   current_fee, current_target_ratio, last_adjustment_timestamp, status
            FROM alphix_pools
            WHERE pool_id = :pool_id
            LIMIT 1
        """
        with self._conn() as conn:
            row = conn.execute(text(sql), {"pool_id": pool_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_pool(row)

    def save_pool(self, *, pool: Pool) -> None:
        sql = """
            INSERT INTO alphix_pools (
                pool_id, currency0, currency1, fee, tick_spacing, hooks,
                initial_fee, initial_target_ratio, pool_type, is_configured,
                min_fee, max_fee, base_max_fee_delta, lookback_period, min_period,
                ratio_tolerance, linear_slope, max_current_ratio,
                lower_side_factor, upper_side_factor,
                current_fee, current_target_ratio, last_adjustment_timestamp, status
            ) VALUES (
                :pool_id, :currency0, :currency1, :fee, :tick_spacing, :hooks,
                :initial_fee, :initial_target_ratio, :pool_type, :is_configured,
                :min_fee, :max_fee, :base_max_fee_delta, :lookback_period, :min_period,
                :ratio_tolerance, :linear_slope, :max_current_ratio,
                :lower_side_factor, :upper_side_factor,
                :current_fee, :current_target_ratio, :last_adjustment_timestamp, :status
            )
            ON CONFLICT (pool_id) DO UPDATE SET
                is_configured = excluded.is_configured,
                min_fee = excluded.min_fee,
                max_fee = excluded.max_fee,
                base_max_fee_delta = excluded.base_max_fee_delta,
                lookback_period = excluded.lookback_period,
                min_period = excluded.min_period,
                ratio_tolerance = excluded.ratio_tolerance,
                linear_slope = excluded.linear_slope,
                max_current_ratio = excluded.max_current_ratio,
                lower_side_factor = excluded.lower_side_factor,
                upper_side_factor = excluded.upper_side_factor,
                current_fee = excluded.current_fee,
                current_target_ratio = excluded.current_target_ratio,
                last_adjustment_timestamp = excluded.last_adjustment_timestamp,
                status = excluded.status
        """
        with self._conn() as conn:
            conn.execute(text(sql), map_pool_to_params(pool))

    def get_vault(self, *, pool_id: str) -> VaultState | None:
        vault_sql = """
            SELECT pool_id, tick_lower, tick_upper, yield_tax_pips, yield_treasury,
                   total_supply, jit_amount0, jit_amount1
            FROM alphix_vaults
            WHERE pool_id = :pool_id
            LIMIT 1
        """
        currency_sql = """
            SELECT slot, currency, yield_source, last_accounted_assets, accumulated_tax
            FROM alphix_vault_currencies
            WHERE pool_id = :pool_id
            ORDER BY slot
        """
        share_sql = """
            SELECT holder, shares
            FROM alphix_vault_shares
            WHERE pool_id = :pool_id
        """
        with self._conn() as conn:
            vault_row = conn.execute(text(vault_sql), {"pool_id": pool_id}).mappings().first()
            if vault_row is None:
                return None
            currency_rows = conn.execute(text(currency_sql), {"pool_id": pool_id}).mappings().all()
            share_rows = conn.execute(text(share_sql), {"pool_id": pool_id}).mappings().all()
        return map_rows_to_vault(vault_row, currency_rows, share_rows)

    def save_vault(self, *, vault: VaultState) -> None:
        vault_sql = """
            INSERT INTO alphix_vaults (
                pool_id, tick_lower, tick_upper, yield_tax_pips, yield_treasury,
                total_supply, jit_amount0, jit_amount1
            ) VALUES (
                :pool_id, :tick_lower, :tick_upper, :yield_tax_pips, :yield_treasury,
                :total_supply, :jit_amount0, :jit_amount1
            )
            ON CONFLICT (pool_id) DO UPDATE SET
                tick_lower = excluded.tick_lower,
                tick_upper = excluded.tick_upper,
                yield_tax_pips = excluded.yield_tax_pips,
                yield_treasury = excluded.yield_treasury,
                total_supply = excluded.total_supply,
                jit_amount0 = excluded.jit_amount0,
                jit_amount1 = excluded.jit_amount1
        """
        currency_sql = """
            INSERT INTO alphix_vault_currencies (
                pool_id, slot, currency, yield_source, last_accounted_assets, accumulated_tax
            ) VALUES (
                :pool_id, :slot, :currency, :yield_source, :last_accounted_assets, :accumulated_tax
            )
            ON CONFLICT (pool_id, slot) DO UPDATE SET
                yield_source = excluded.yield_source,
                last_accounted_assets = excluded.last_accounted_assets,
                accumulated_tax = excluded.accumulated_tax
        """
        delete_shares_sql = "DELETE FROM alphix_vault_shares WHERE pool_id = :pool_id"
        insert_share_sql = """
            INSERT INTO alphix_vault_shares (pool_id, holder, shares)
            VALUES (:pool_id, :holder, :shares)
        """
        share_params = [
            {"pool_id": vault.pool_id, "holder": holder, "shares": str(shares)}
            for holder, shares in vault.balances.items()
            if shares > 0
        ]
        with self._conn() as conn:
            conn.execute(text(vault_sql), map_vault_to_params(vault))
            for slot, ledger in enumerate(vault.ledgers()):
                conn.execute(text(currency_sql), map_ledger_to_params(vault.pool_id, slot, ledger))
            conn.execute(text(delete_shares_sql), {"pool_id": vault.pool_id})
            if share_params:
                conn.execute(text(insert_share_sql), share_params)
        logger.debug(
            "pool_state_repository: vault_saved pool=%s total_supply=%s holders=%s",
            vault.pool_id,
            vault.total_supply,
            len(share_params),
        )
