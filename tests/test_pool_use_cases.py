from __future__ import annotations

from dataclasses import replace
import threading

import pytest

from alphix.application.dto.fee import PokeFeeInput, SetGlobalMaxAdjRateInput, SetPoolParamsInput
from alphix.application.dto.pool import InitializePoolInput, SetPoolStatusInput, SetProtocolPauseInput
from alphix.application.use_cases.get_pool import GetPoolUseCase
from alphix.application.use_cases.get_pool_fee import GetPoolFeeUseCase
from alphix.application.use_cases.initialize_pool import InitializePoolUseCase
from alphix.application.use_cases.poke_fee import PokeFeeUseCase
from alphix.application.use_cases.set_global_max_adj_rate import SetGlobalMaxAdjRateUseCase
from alphix.application.use_cases.set_pool_params import SetPoolParamsUseCase
from alphix.application.use_cases.set_pool_status import SetPoolStatusUseCase
from alphix.application.use_cases.set_protocol_pause import SetProtocolPauseUseCase
from alphix.domain.entities.events import FeeUpdated, PoolConfigured, PoolDeactivated, ProtocolPauseChanged
from alphix.domain.exceptions import (
    AccessDeniedError,
    CooldownNotElapsedError,
    InvalidAddressError,
    InvalidFeeError,
    InvalidParameterError,
    InvalidRatioError,
    LogicNotSetError,
    PoolAlreadyConfiguredError,
    PoolNotConfiguredError,
    PoolPausedError,
    ProtocolPausedError,
    ReentrancyError,
)
from alphix.domain.services.pool_defaults import default_params_for
from alphix.domain.services.target_ratio_smoothing import EmaTargetSmoothing
from alphix.domain.services.univ3_math import Q96, max_usable_tick, min_usable_tick
from tests.fakes import (
    ALICE,
    HOOK,
    LOGIC,
    OWNER,
    POKER,
    initialize_pool,
    make_deployment,
    pool_key,
)


def _initialize_use_case(deployment, *, logic_address=LOGIC):
    return InitializePoolUseCase(
        state_port=deployment.state,
        host_port=deployment.host,
        access_gate=deployment.gate,
        clock=deployment.clock,
        event_sink=deployment.events,
        hook_address=HOOK,
        logic_address=logic_address,
    )


def _init_input(**overrides):
    values = dict(
        caller=OWNER,
        key=pool_key(),
        initial_fee=1000,
        initial_target_ratio=5 * 10**17,
        pool_type="standard",
        sqrt_price_x96=Q96,
    )
    values.update(overrides)
    return InitializePoolInput(**values)


def _poke_use_case(deployment):
    return PokeFeeUseCase(
        state_port=deployment.state,
        access_gate=deployment.gate,
        clock=deployment.clock,
        event_sink=deployment.events,
        smoothing=EmaTargetSmoothing(),
        guard=deployment.guard,
    )


def _status_use_case(deployment):
    return SetPoolStatusUseCase(state_port=deployment.state, access_gate=deployment.gate, event_sink=deployment.events)


def _pause_use_case(deployment):
    return SetProtocolPauseUseCase(
        state_port=deployment.state,
        access_gate=deployment.gate,
        event_sink=deployment.events,
    )


class TestInitializePool:
    def test_initialize_binds_pool_with_defaults(self):
        deployment = make_deployment()
        output = _initialize_use_case(deployment).execute(_init_input())

        assert output.status == "active"
        assert output.lifecycle_state == "configured_active"
        assert output.current_fee == 1000
        assert deployment.state.get_protocol_settings().pool_id == output.pool_id
        assert deployment.host.initialized[0][2] == HOOK

        pool = deployment.state.get_pool(pool_id=output.pool_id)
        assert pool.params == default_params_for("standard")
        vault = deployment.state.get_vault(pool_id=output.pool_id)
        assert vault.config.tick_lower == min_usable_tick(60)
        assert vault.config.tick_upper == max_usable_tick(60)
        assert vault.total_supply == 0
        assert len(deployment.events.of_type(PoolConfigured)) == 1

    def test_initialize_requires_pool_owner(self):
        deployment = make_deployment()
        with pytest.raises(AccessDeniedError):
            _initialize_use_case(deployment).execute(_init_input(caller=ALICE))

    def test_initialize_without_logic_fails(self):
        deployment = make_deployment()
        with pytest.raises(LogicNotSetError):
            _initialize_use_case(deployment, logic_address=None).execute(_init_input())

    def test_initialize_with_foreign_hook_fails(self):
        deployment = make_deployment()
        with pytest.raises(InvalidAddressError):
            _initialize_use_case(deployment).execute(_init_input(key=pool_key(hooks=ALICE)))

    def test_second_pool_is_rejected(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        with pytest.raises(PoolAlreadyConfiguredError):
            _initialize_use_case(deployment).execute(_init_input(key=pool_key(tick_spacing=10)))
        assert len(deployment.host.initialized) == 1

    def test_initial_fee_out_of_bounds_is_rejected(self):
        deployment = make_deployment()
        with pytest.raises(InvalidFeeError):
            _initialize_use_case(deployment).execute(_init_input(initial_fee=10))
        assert deployment.state.get_protocol_settings().pool_id is None

    def test_explicit_params_override_defaults(self):
        deployment = make_deployment()
        params = replace(default_params_for("volatile"), min_fee=100)
        output = _initialize_use_case(deployment).execute(_init_input(pool_type="volatile", params=params))
        assert deployment.state.get_pool(pool_id=output.pool_id).params.min_fee == 100


class TestPokeFee:
    def test_poke_after_cooldown_raises_fee_and_emits_event(self):
        deployment = make_deployment()
        pool_id = initialize_pool(deployment)
        deployment.clock.advance(86_400)

        output = _poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=8 * 10**17))

        assert output.old_fee == 1000
        assert output.new_fee == 1100
        assert deployment.state.get_pool(pool_id=pool_id).fee_state.current_fee == 1100
        assert deployment.events.of_type(FeeUpdated)[0].new_fee == 1100

    def test_poke_before_cooldown_fails(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        with pytest.raises(CooldownNotElapsedError):
            _poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=8 * 10**17))

    def test_poke_sequence_up_then_down(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        use_case = _poke_use_case(deployment)

        deployment.clock.advance(86_400)
        up = use_case.execute(PokeFeeInput(caller=POKER, current_ratio=8 * 10**17))
        deployment.clock.advance(86_400)
        down = use_case.execute(PokeFeeInput(caller=POKER, current_ratio=2 * 10**17))

        assert up.new_fee > 1000
        assert down.new_fee < up.new_fee

    def test_zero_ratio_is_rejected_before_authorization(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        with pytest.raises(InvalidRatioError):
            _poke_use_case(deployment).execute(PokeFeeInput(caller=ALICE, current_ratio=0))

    def test_poke_requires_fee_poker(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        with pytest.raises(AccessDeniedError):
            _poke_use_case(deployment).execute(PokeFeeInput(caller=ALICE, current_ratio=10**18))

    def test_poke_on_inactive_pool_fails(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        _status_use_case(deployment).execute(SetPoolStatusInput(caller=OWNER, active=False))
        deployment.clock.advance(86_400)
        with pytest.raises(PoolPausedError):
            _poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=10**18))

    def test_poke_without_pool_fails(self):
        deployment = make_deployment()
        with pytest.raises(PoolNotConfiguredError):
            _poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=10**18))

    def test_reentrant_poke_is_rejected(self):
        deployment = make_deployment()
        pool_id = initialize_pool(deployment)
        deployment.clock.advance(86_400)
        with deployment.guard.enter(pool_id):
            with pytest.raises(ReentrancyError):
                _poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=10**18))

    def test_guard_held_on_one_thread_does_not_block_another(self):
        deployment = make_deployment()
        pool_id = initialize_pool(deployment)
        deployment.clock.advance(86_400)
        outputs = []

        def _poke():
            outputs.append(_poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=10**18)))

        with deployment.guard.enter(pool_id):
            worker = threading.Thread(target=_poke)
            worker.start()
            worker.join(timeout=5)
        assert len(outputs) == 1


class TestFeeAdministration:
    def test_set_params_tolerates_out_of_bounds_fee_until_next_poke(self):
        deployment = make_deployment()
        pool_id = initialize_pool(deployment)
        params = replace(default_params_for("standard"), min_fee=2000, max_fee=5000)

        SetPoolParamsUseCase(
            state_port=deployment.state,
            access_gate=deployment.gate,
            event_sink=deployment.events,
        ).execute(SetPoolParamsInput(caller=OWNER, params=params))
        assert deployment.state.get_pool(pool_id=pool_id).fee_state.current_fee == 1000

        deployment.clock.advance(86_400)
        output = _poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=5 * 10**17))
        assert output.within_tolerance is True
        assert output.new_fee == 2000

    def test_set_params_rejects_inverted_bounds(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        params = replace(default_params_for("standard"), min_fee=6000, max_fee=5000)
        with pytest.raises(InvalidParameterError):
            SetPoolParamsUseCase(
                state_port=deployment.state,
                access_gate=deployment.gate,
                event_sink=deployment.events,
            ).execute(SetPoolParamsInput(caller=OWNER, params=params))

    def test_failed_transaction_on_another_thread_keeps_committed_params(self):
        deployment = make_deployment()
        pool_id = initialize_pool(deployment)
        params = replace(default_params_for("standard"), max_fee=9999)
        started = threading.Event()
        release = threading.Event()
        failures = []

        def _stalled(repo):
            started.set()
            release.wait(timeout=5)
            raise RuntimeError("boom")

        def _failing_writer():
            try:
                deployment.state.execute_in_transaction(_stalled)
            except RuntimeError as exc:
                failures.append(exc)

        def _params_writer():
            SetPoolParamsUseCase(
                state_port=deployment.state,
                access_gate=deployment.gate,
                event_sink=deployment.events,
            ).execute(SetPoolParamsInput(caller=OWNER, params=params))

        first = threading.Thread(target=_failing_writer)
        first.start()
        assert started.wait(timeout=5)
        second = threading.Thread(target=_params_writer)
        second.start()
        second.join(timeout=0.2)
        assert second.is_alive()

        release.set()
        first.join(timeout=5)
        second.join(timeout=5)
        assert len(failures) == 1
        assert deployment.state.get_pool(pool_id=pool_id).params.max_fee == 9999

    def test_global_max_adj_rate_update(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        use_case = SetGlobalMaxAdjRateUseCase(
            state_port=deployment.state,
            access_gate=deployment.gate,
            event_sink=deployment.events,
        )
        assert use_case.execute(SetGlobalMaxAdjRateInput(caller=OWNER, rate=10**17)) == 10**17
        assert GetPoolFeeUseCase(state_port=deployment.state).execute().global_max_adj_rate == 10**17
        with pytest.raises(InvalidParameterError):
            use_case.execute(SetGlobalMaxAdjRateInput(caller=OWNER, rate=0))

    def test_get_fee_reports_next_adjustment_time(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        output = GetPoolFeeUseCase(state_port=deployment.state).execute()
        assert output.next_adjustment_time == deployment.clock.now() + 86_400
        assert output.params == default_params_for("standard")


class TestPoolStatus:
    def test_deactivate_and_reactivate(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        output = _status_use_case(deployment).execute(SetPoolStatusInput(caller=OWNER, active=False))
        assert output.lifecycle_state == "configured_inactive"
        assert deployment.events.of_type(PoolDeactivated)
        output = _status_use_case(deployment).execute(SetPoolStatusInput(caller=OWNER, active=True))
        assert output.lifecycle_state == "configured_active"

    def test_pause_overrides_lifecycle_state(self):
        deployment = make_deployment()
        initialize_pool(deployment)
        _pause_use_case(deployment).execute(SetProtocolPauseInput(caller=OWNER, paused=True))
        assert GetPoolUseCase(state_port=deployment.state).execute().lifecycle_state == "paused_override"
        assert deployment.events.of_type(ProtocolPauseChanged)[0].paused is True

        deployment.clock.advance(86_400)
        with pytest.raises(ProtocolPausedError):
            _poke_use_case(deployment).execute(PokeFeeInput(caller=POKER, current_ratio=10**18))

        _pause_use_case(deployment).execute(SetProtocolPauseInput(caller=OWNER, paused=False))
        assert GetPoolUseCase(state_port=deployment.state).execute().lifecycle_state == "configured_active"

    def test_pause_requires_owner(self):
        deployment = make_deployment()
        with pytest.raises(AccessDeniedError):
            _pause_use_case(deployment).execute(SetProtocolPauseInput(caller=ALICE, paused=True))
