from __future__ import annotations

from alphix.domain.entities.pool import NATIVE_CURRENCY, ZERO_ADDRESS
from alphix.domain.entities.rehypothecation import CurrencyLedger, ReHypothecationConfig, VaultState
from alphix.domain.exceptions import InvalidAddressError, InvalidTickRangeError, InvalidYieldTaxError
from alphix.domain.services.ratio_math import PIPS_DENOMINATOR
from alphix.domain.services.univ3_math import (
    MAX_TICK,
    MIN_TICK,
    is_aligned,
    max_usable_tick,
    min_usable_tick,
)


MAX_YIELD_TAX_PIPS = PIPS_DENOMINATOR


def is_empty_address(address: str | None) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


def is_native(currency: str) -> bool:
    return currency.lower() == NATIVE_CURRENCY


def validate_tick_range(tick_lower: int, tick_upper: int, tick_spacing: int) -> None:
    if tick_lower >= tick_upper:
        raise InvalidTickRangeError(tick_lower, tick_upper)
    if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
        raise InvalidTickRangeError(tick_lower, tick_upper)
    if not is_aligned(tick_lower, tick_spacing) or not is_aligned(tick_upper, tick_spacing):
        raise InvalidTickRangeError(tick_lower, tick_upper)


def validate_yield_tax(pips: int) -> None:
    if pips < 0 or pips > MAX_YIELD_TAX_PIPS:
        raise InvalidYieldTaxError(pips)


def validate_treasury(address: str | None) -> str:
    if is_empty_address(address):
        raise InvalidAddressError(address)
    return address


def default_vault_state(*, pool_id: str, currency0: str, currency1: str, tick_spacing: int) -> VaultState:
    return VaultState(
        pool_id=pool_id,
        config=ReHypothecationConfig(
            tick_lower=min_usable_tick(tick_spacing),
            tick_upper=max_usable_tick(tick_spacing),
            yield_tax_pips=0,
            yield_treasury=None,
        ),
        total_supply=0,
        currency0=CurrencyLedger(
            currency=currency0,
            yield_source=None,
            last_accounted_assets=0,
            accumulated_tax=0,
        ),
        currency1=CurrencyLedger(
            currency=currency1,
            yield_source=None,
            last_accounted_assets=0,
            accumulated_tax=0,
        ),
        balances={},
        jit_position=None,
    )
