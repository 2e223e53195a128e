from __future__ import annotations

import pytest

from alphix.domain.exceptions import AccessDeniedError
from alphix.infrastructure.security.access_gate import RoleAccessGate
from alphix.infrastructure.yield_sources.directory import StaticYieldSourceDirectory
from alphix.infrastructure.yield_sources.in_memory_yield_source import InMemoryYieldSource
from alphix.infrastructure.yield_sources.share_vault_yield_source import ShareVault, ShareVaultYieldSource
from tests.fakes import HOOK, OWNER, POKER, SOURCE0, SOURCE1, TOKEN0, TOKEN1


class TestInMemoryYieldSource:
    def test_deposit_withdraw_and_yield(self):
        source = InMemoryYieldSource(address=SOURCE0, asset=TOKEN0, initial_assets=100)
        source.deposit(900)
        source.simulate_yield(50)
        assert source.total_assets() == 1050
        assert source.withdraw(1050) == 1050
        assert source.total_assets() == 0

    def test_rejects_overdraw_and_negative_deposit(self):
        source = InMemoryYieldSource(address=SOURCE0, asset=TOKEN0)
        with pytest.raises(ValueError):
            source.deposit(-1)
        with pytest.raises(ValueError):
            source.withdraw(1)

    def test_loss_is_rounded_down(self):
        source = InMemoryYieldSource(address=SOURCE0, asset=TOKEN0, initial_assets=999)
        assert source.simulate_loss_bps(1000) == 99
        assert source.total_assets() == 900


class TestShareVaultYieldSource:
    def test_yield_flows_to_position(self):
        vault = ShareVault(asset=TOKEN0)
        source = ShareVaultYieldSource(address=SOURCE0, vault=vault, owner=HOOK)
        assert source.deposit(1000) == 1000
        vault.accrue(100)
        assert source.total_assets() == 1100

    def test_withdraw_burns_shares_rounded_up(self):
        vault = ShareVault(asset=TOKEN0)
        source = ShareVaultYieldSource(address=SOURCE0, vault=vault, owner=HOOK)
        source.deposit(1000)
        vault.accrue(100)

        assert source.withdraw(550) == 550
        assert vault.shares_of(HOOK) == 499
        assert source.total_assets() == 549

    def test_withdraw_is_capped_at_position(self):
        vault = ShareVault(asset=TOKEN1)
        source = ShareVaultYieldSource(address=SOURCE1, vault=vault, owner=HOOK)
        source.deposit(10)
        assert source.withdraw(50) == 10
        assert source.withdraw(5) == 0
        assert source.asset == TOKEN1

    def test_preview_deposit_matches_position_gain(self):
        vault = ShareVault(asset=TOKEN0)
        ShareVaultYieldSource(address=SOURCE0, vault=vault, owner=HOOK).deposit(1000)
        vault.accrue(100)
        source = ShareVaultYieldSource(address=SOURCE1, vault=vault, owner=OWNER)

        quoted = source.preview_deposit(550)
        source.deposit(550)
        assert quoted == 549
        assert source.total_assets() == quoted
        assert source.preview_deposit(0) == 0


class TestStaticYieldSourceDirectory:
    def test_resolve_is_case_insensitive(self):
        source = InMemoryYieldSource(address="0xAbCd000000000000000000000000000000000001", asset=TOKEN0)
        directory = StaticYieldSourceDirectory([source])
        assert directory.resolve(address="0xabcd000000000000000000000000000000000001") is source

    def test_unknown_or_empty_address_resolves_to_none(self):
        directory = StaticYieldSourceDirectory()
        assert directory.resolve(address=SOURCE1) is None
        assert directory.resolve(address="") is None


class TestRoleAccessGate:
    def test_granted_caller_passes_case_insensitively(self):
        gate = RoleAccessGate({"pool_owner": [OWNER.upper().replace("0X", "0x")]})
        gate.require(capability="pool_owner", caller=OWNER)

    def test_other_capability_is_denied(self):
        gate = RoleAccessGate({"fee_poker": [POKER]})
        with pytest.raises(AccessDeniedError):
            gate.require(capability="pool_owner", caller=POKER)
        with pytest.raises(AccessDeniedError):
            gate.require(capability="fee_poker", caller="")
