from __future__ import annotations

import pytest

from alphix.application.dto.pool import SetPoolStatusInput, SetProtocolPauseInput
from alphix.application.dto.rehypothecation import (
    LiquidityInput,
    SetTickRangeInput,
    SetYieldTaxInput,
    SetYieldTreasuryInput,
)
from alphix.application.use_cases.add_rehypothecated_liquidity import AddReHypothecatedLiquidityUseCase
from alphix.application.use_cases.collect_accumulated_tax import CollectAccumulatedTaxUseCase
from alphix.application.use_cases.get_vault import GetVaultUseCase
from alphix.application.use_cases.preview_add_liquidity import PreviewAddLiquidityUseCase
from alphix.application.use_cases.preview_remove_liquidity import PreviewRemoveLiquidityUseCase
from alphix.application.use_cases.remove_rehypothecated_liquidity import (
    RemoveReHypothecatedLiquidityUseCase,
)
from alphix.application.use_cases.set_pool_status import SetPoolStatusUseCase
from alphix.application.use_cases.set_protocol_pause import SetProtocolPauseUseCase
from alphix.application.use_cases.set_tick_range import SetTickRangeUseCase
from alphix.application.use_cases.set_yield_tax import SetYieldTaxUseCase
from alphix.application.use_cases.set_yield_treasury import SetYieldTreasuryUseCase
from alphix.domain.entities.events import AccumulatedTaxCollected, LiquidityAdded, LiquidityRemoved
from alphix.domain.entities.pool import ZERO_ADDRESS
from alphix.domain.exceptions import (
    AccessDeniedError,
    InsufficientSharesError,
    InvalidAddressError,
    InvalidTickRangeError,
    InvalidYieldTaxError,
    PoolPausedError,
    ProtocolPausedError,
    ReentrancyError,
    YieldSourceNotSetError,
    ZeroSharesError,
)
from tests.fakes import (
    ALICE,
    BOB,
    FakeSettlement,
    OWNER,
    SOURCE0,
    SOURCE1,
    TOKEN0,
    TOKEN1,
    TREASURY,
    initialize_pool,
    make_deployment,
    make_vault_deployment,
)


SHARES = 10**18


def _add(deployment, caller, shares):
    return AddReHypothecatedLiquidityUseCase(
        state_port=deployment.state,
        host_port=deployment.host,
        settlement=deployment.settlement,
        yield_sources=deployment.directory,
        event_sink=deployment.events,
        guard=deployment.guard,
    ).execute(LiquidityInput(caller=caller, shares=shares))


def _remove(deployment, caller, shares):
    return RemoveReHypothecatedLiquidityUseCase(
        state_port=deployment.state,
        settlement=deployment.settlement,
        yield_sources=deployment.directory,
        event_sink=deployment.events,
        guard=deployment.guard,
    ).execute(LiquidityInput(caller=caller, shares=shares))


def _collect(deployment):
    return CollectAccumulatedTaxUseCase(
        state_port=deployment.state,
        settlement=deployment.settlement,
        yield_sources=deployment.directory,
        event_sink=deployment.events,
        guard=deployment.guard,
    ).execute()


def _preview_add(deployment, shares):
    return PreviewAddLiquidityUseCase(
        state_port=deployment.state,
        host_port=deployment.host,
        yield_sources=deployment.directory,
    ).execute(shares=shares)


def _preview_remove(deployment, shares):
    return PreviewRemoveLiquidityUseCase(
        state_port=deployment.state,
        yield_sources=deployment.directory,
    ).execute(shares=shares)


def _vault(deployment, holder=None):
    return GetVaultUseCase(state_port=deployment.state, yield_sources=deployment.directory).execute(holder=holder)


def _set_tax(deployment, pips):
    return SetYieldTaxUseCase(
        state_port=deployment.state,
        access_gate=deployment.gate,
        yield_sources=deployment.directory,
        event_sink=deployment.events,
    ).execute(SetYieldTaxInput(caller=OWNER, yield_tax_pips=pips))


def _set_treasury(deployment, treasury):
    return SetYieldTreasuryUseCase(
        state_port=deployment.state,
        access_gate=deployment.gate,
        event_sink=deployment.events,
    ).execute(SetYieldTreasuryInput(caller=OWNER, yield_treasury=treasury))


class TestAddAndRemove:
    def test_first_deposit_uses_liquidity_amounts_at_spot_price(self):
        deployment = make_vault_deployment()
        preview = _preview_add(deployment, SHARES)
        result = _add(deployment, ALICE, SHARES)

        assert (result.amount0, result.amount1) == (preview.amount0, preview.amount1)
        assert result.amount0 > 0 and result.amount1 > 0
        assert deployment.sources[SOURCE0].total_assets() == result.amount0
        assert deployment.sources[SOURCE1].total_assets() == result.amount1
        assert deployment.settlement.pulls == [(TOKEN0, ALICE, result.amount0), (TOKEN1, ALICE, result.amount1)]

        vault = _vault(deployment, holder=ALICE)
        assert vault.total_supply == SHARES
        assert vault.caller_balance == SHARES
        assert deployment.events.of_type(LiquidityAdded)[0].shares == SHARES

    def test_round_trip_never_returns_more_than_deposited(self):
        deployment = make_vault_deployment()
        added = _add(deployment, ALICE, SHARES)
        removed = _remove(deployment, ALICE, SHARES)

        assert removed.amount0 <= added.amount0
        assert removed.amount1 <= added.amount1
        assert _vault(deployment).total_supply == 0
        assert deployment.events.of_type(LiquidityRemoved)[0].amount0 == removed.amount0

    def test_equal_shares_get_equal_terms(self):
        deployment = make_vault_deployment()
        alice = _add(deployment, ALICE, SHARES)
        bob = _add(deployment, BOB, SHARES)
        assert abs(alice.amount0 - bob.amount0) <= 1
        assert abs(alice.amount1 - bob.amount1) <= 1

        alice_out = _remove(deployment, ALICE, SHARES)
        bob_out = _remove(deployment, BOB, SHARES)
        assert abs(alice_out.amount0 - bob_out.amount0) <= 1
        assert abs(alice_out.amount1 - bob_out.amount1) <= 1

    def test_preview_remove_matches_remove(self):
        deployment = make_vault_deployment()
        _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE0].simulate_yield(12_345)
        preview = _preview_remove(deployment, SHARES // 3)
        removed = _remove(deployment, ALICE, SHARES // 3)
        assert (preview.amount0, preview.amount1) == (removed.amount0, removed.amount1)

    def test_loss_shrinks_every_holders_slice(self):
        deployment = make_vault_deployment()
        added = _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE0].simulate_loss_bps(1000)
        deployment.sources[SOURCE1].simulate_loss_bps(1000)

        preview = _preview_remove(deployment, SHARES)
        assert abs(preview.amount0 - added.amount0 * 9 // 10) <= 1
        assert abs(preview.amount1 - added.amount1 * 9 // 10) <= 1

    def test_loss_on_one_asset_leaves_the_other_untouched(self):
        deployment = make_vault_deployment()
        added = _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE0].simulate_loss_bps(1000)

        preview = _preview_remove(deployment, SHARES)
        assert abs(preview.amount0 - added.amount0 * 9 // 10) <= 1
        assert preview.amount1 == added.amount1

    def test_failed_pull_on_second_currency_moves_no_funds(self):
        deployment = make_vault_deployment()
        _add(deployment, ALICE, SHARES)
        held0 = deployment.sources[SOURCE0].total_assets()
        held1 = deployment.sources[SOURCE1].total_assets()
        before = _preview_remove(deployment, SHARES)
        deployment.settlement = FakeSettlement(fail_pull_on=TOKEN1)

        with pytest.raises(RuntimeError):
            _add(deployment, BOB, SHARES)

        assert deployment.sources[SOURCE0].total_assets() == held0
        assert deployment.sources[SOURCE1].total_assets() == held1
        assert _vault(deployment, holder=BOB).caller_balance == 0
        assert _preview_remove(deployment, SHARES) == before
        pulled0 = sum(amount for currency, payer, amount in deployment.settlement.pulls if currency == TOKEN0)
        assert pulled0 > 0
        assert deployment.settlement.pushed_to(BOB) == {TOKEN0: pulled0}

    def test_preview_of_non_positive_shares_is_zero(self):
        deployment = make_vault_deployment()
        assert _preview_add(deployment, 0).amount0 == 0
        assert _preview_remove(deployment, -5).amount1 == 0

    def test_add_requires_both_yield_sources(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        with pytest.raises(YieldSourceNotSetError):
            _add(deployment, ALICE, SHARES)

    def test_zero_shares_rejected(self):
        deployment = make_vault_deployment()
        with pytest.raises(ZeroSharesError):
            _add(deployment, ALICE, 0)
        with pytest.raises(ZeroSharesError):
            _remove(deployment, ALICE, 0)

    def test_remove_more_than_balance_fails(self):
        deployment = make_vault_deployment()
        _add(deployment, ALICE, SHARES)
        with pytest.raises(InsufficientSharesError):
            _remove(deployment, BOB, 1)

    def test_add_on_inactive_pool_fails_but_remove_is_allowed(self):
        deployment = make_vault_deployment()
        _add(deployment, ALICE, SHARES)
        SetPoolStatusUseCase(
            state_port=deployment.state,
            access_gate=deployment.gate,
            event_sink=deployment.events,
        ).execute(SetPoolStatusInput(caller=OWNER, active=False))

        with pytest.raises(PoolPausedError):
            _add(deployment, BOB, SHARES)
        assert _remove(deployment, ALICE, SHARES).shares == SHARES

    def test_pause_blocks_remove(self):
        deployment = make_vault_deployment()
        _add(deployment, ALICE, SHARES)
        SetProtocolPauseUseCase(
            state_port=deployment.state,
            access_gate=deployment.gate,
            event_sink=deployment.events,
        ).execute(SetProtocolPauseInput(caller=OWNER, paused=True))
        with pytest.raises(ProtocolPausedError):
            _remove(deployment, ALICE, SHARES)

    def test_reentrant_add_is_rejected_and_state_is_unchanged(self):
        deployment = make_vault_deployment()
        with deployment.guard.enter(deployment.pool_id):
            with pytest.raises(ReentrancyError):
                _add(deployment, ALICE, SHARES)
        assert _vault(deployment).total_supply == 0
        assert deployment.settlement.pulls == []


class TestYieldTax:
    def test_collect_after_yield_pays_tax_to_treasury(self):
        deployment = make_vault_deployment()
        _set_tax(deployment, 100_000)
        _set_treasury(deployment, TREASURY)
        _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE0].simulate_yield(1_000_000)

        result = _collect(deployment)

        assert (result.collected0, result.collected1) == (100_000, 0)
        assert deployment.settlement.pushed_to(TREASURY) == {TOKEN0: 100_000}
        assert _vault(deployment).currency0.accumulated_tax == 0
        assert deployment.events.of_type(AccumulatedTaxCollected)[0].amount0 == 100_000

    def test_depositors_keep_yield_net_of_tax(self):
        deployment = make_vault_deployment()
        _set_tax(deployment, 100_000)
        added = _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE0].simulate_yield(1_000_000)
        assert _preview_remove(deployment, SHARES).amount0 == added.amount0 + 900_000

    def test_collect_after_loss_returns_nothing(self):
        deployment = make_vault_deployment()
        _set_tax(deployment, 100_000)
        _set_treasury(deployment, TREASURY)
        _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE0].simulate_loss_bps(500)

        result = _collect(deployment)

        assert (result.collected0, result.collected1) == (0, 0)
        assert deployment.settlement.pushes == []
        assert deployment.events.of_type(AccumulatedTaxCollected) == []

    def test_collect_without_treasury_keeps_tax_accrued(self):
        deployment = make_vault_deployment()
        _set_tax(deployment, 100_000)
        _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE1].simulate_yield(50_000)

        result = _collect(deployment)

        assert (result.collected0, result.collected1) == (0, 0)
        assert _vault(deployment).currency1.accumulated_tax == 5_000

    def test_tax_rate_change_settles_earlier_yield_at_old_rate(self):
        deployment = make_vault_deployment()
        _set_tax(deployment, 200_000)
        _add(deployment, ALICE, SHARES)
        deployment.sources[SOURCE0].simulate_yield(1_000_000)
        _set_tax(deployment, 0)
        deployment.sources[SOURCE0].simulate_yield(1_000_000)

        assert _vault(deployment).currency0.accumulated_tax == 200_000

    def test_invalid_tax_rejected(self):
        deployment = make_vault_deployment()
        with pytest.raises(InvalidYieldTaxError):
            _set_tax(deployment, 1_000_001)


class TestVaultConfiguration:
    def test_tick_range_must_be_ordered_and_aligned(self):
        deployment = make_vault_deployment()
        use_case = SetTickRangeUseCase(
            state_port=deployment.state,
            access_gate=deployment.gate,
            event_sink=deployment.events,
        )
        assert use_case.execute(SetTickRangeInput(caller=OWNER, tick_lower=-600, tick_upper=600)) == (-600, 600)
        with pytest.raises(InvalidTickRangeError):
            use_case.execute(SetTickRangeInput(caller=OWNER, tick_lower=-601, tick_upper=600))
        with pytest.raises(InvalidTickRangeError):
            use_case.execute(SetTickRangeInput(caller=OWNER, tick_lower=600, tick_upper=600))
        with pytest.raises(AccessDeniedError):
            use_case.execute(SetTickRangeInput(caller=ALICE, tick_lower=-60, tick_upper=60))
        assert _vault(deployment).tick_lower == -600

    def test_treasury_must_be_a_real_address(self):
        deployment = make_vault_deployment()
        with pytest.raises(InvalidAddressError):
            _set_treasury(deployment, ZERO_ADDRESS)
        assert _set_treasury(deployment, TREASURY) == TREASURY
        assert _vault(deployment).yield_treasury == TREASURY

    def test_vault_reports_amounts_in_yield_sources(self):
        deployment = make_vault_deployment()
        added = _add(deployment, ALICE, SHARES)
        vault = _vault(deployment)
        assert vault.currency0.yield_source == SOURCE0
        assert vault.currency0.amount_in_yield_source == added.amount0
        assert vault.currency1.amount_in_yield_source == added.amount1
        assert vault.caller_balance is None
