from __future__ import annotations

from dataclasses import replace

from alphix.domain.entities.rehypothecation import CurrencyAccrual, CurrencyLedger, VaultState
from alphix.domain.exceptions import InsufficientSharesError, ZeroSharesError
from alphix.domain.services.ratio_math import Rounding, apply_pips, proportional
from alphix.domain.services.univ3_math import amounts_for_liquidity


def net_assets(total_assets: int, accumulated_tax: int) -> int:
    return max(0, total_assets - accumulated_tax)


def accrue_yield_tax(ledger: CurrencyLedger, *, total_assets: int, yield_tax_pips: int) -> CurrencyAccrual:
    """
    Bring one currency's ledger up to date with its yield source.

    Only growth above ``last_accounted_assets`` is taxed; a loss lowers the
    baseline without producing negative tax. The tax stays inside the yield
    source until collected, so it is carved out of the net assets that back
    shares.
    """
    current = net_assets(total_assets, ledger.accumulated_tax)
    if current > ledger.last_accounted_assets:
        yield_amount = current - ledger.last_accounted_assets
        tax = min(apply_pips(yield_amount, yield_tax_pips), current)
    else:
        yield_amount = 0
        tax = 0

    updated = replace(
        ledger,
        accumulated_tax=ledger.accumulated_tax + tax,
        last_accounted_assets=current - tax,
    )
    return CurrencyAccrual(
        ledger=updated,
        total_assets=total_assets,
        net_assets=current - tax,
        yield_amount=yield_amount,
        tax=tax,
    )


def record_deposit(ledger: CurrencyLedger, amount: int) -> CurrencyLedger:
    return replace(ledger, last_accounted_assets=ledger.last_accounted_assets + amount)


def record_withdrawal(ledger: CurrencyLedger, amount: int) -> CurrencyLedger:
    return replace(ledger, last_accounted_assets=max(0, ledger.last_accounted_assets - amount))


def initial_deposit_amounts(
    *,
    shares: int,
    sqrt_price_x96: int,
    tick_lower: int,
    tick_upper: int,
) -> tuple[int, int]:
    return amounts_for_liquidity(
        sqrt_price_x96=sqrt_price_x96,
        tick_lower=tick_lower,
        tick_upper=tick_upper,
        liquidity=shares,
        round_up=True,
    )


def proportional_amounts(
    *,
    shares: int,
    total_supply: int,
    net_assets0: int,
    net_assets1: int,
    rounding: Rounding,
) -> tuple[int, int]:
    return (
        proportional(net_assets0, shares, total_supply, rounding),
        proportional(net_assets1, shares, total_supply, rounding),
    )


def preview_remove_amounts(
    *,
    shares: int,
    total_supply: int,
    net_assets0: int,
    net_assets1: int,
) -> tuple[int, int]:
    if shares > total_supply:
        shares = total_supply
    return proportional_amounts(
        shares=shares,
        total_supply=total_supply,
        net_assets0=net_assets0,
        net_assets1=net_assets1,
        rounding=Rounding.DOWN,
    )


def require_shares(shares: int) -> None:
    if shares <= 0:
        raise ZeroSharesError()


def mint_shares(vault: VaultState, holder: str, shares: int) -> VaultState:
    require_shares(shares)
    balances = dict(vault.balances)
    balances[holder] = balances.get(holder, 0) + shares
    return replace(vault, balances=balances, total_supply=vault.total_supply + shares)


def burn_shares(vault: VaultState, holder: str, shares: int) -> VaultState:
    require_shares(shares)
    available = vault.balance_of(holder)
    if shares > available:
        raise InsufficientSharesError(shares, available)
    balances = dict(vault.balances)
    remaining = available - shares
    if remaining:
        balances[holder] = remaining
    else:
        balances.pop(holder, None)
    return replace(vault, balances=balances, total_supply=vault.total_supply - shares)
