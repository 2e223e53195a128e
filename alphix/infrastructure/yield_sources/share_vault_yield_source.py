from __future__ import annotations

from alphix.domain.services.ratio_math import Rounding, mul_div


class ShareVault:
    """
    Tokenized vault with share accounting.

    Conversions use a virtual share and a virtual asset so the first deposit
    cannot be inflated; deposits mint shares rounded down and withdrawals
    burn shares rounded up, both in the vault's favour.
    """

    def __init__(self, *, asset: str):
        self.asset = asset
        self.total_assets = 0
        self.total_shares = 0
        self._shares: dict[str, int] = {}

    def shares_of(self, owner: str) -> int:
        return self._shares.get(owner, 0)

    def convert_to_shares(self, assets: int, rounding: Rounding = Rounding.DOWN) -> int:
        return mul_div(assets, self.total_shares + 1, self.total_assets + 1, rounding)

    def convert_to_assets(self, shares: int, rounding: Rounding = Rounding.DOWN) -> int:
        return mul_div(shares, self.total_assets + 1, self.total_shares + 1, rounding)

    def max_withdraw(self, owner: str) -> int:
        return self.convert_to_assets(self.shares_of(owner))

    def preview_deposit(self, assets: int) -> int:
        """Redeemable value of the shares ``assets`` would mint."""
        shares = self.convert_to_shares(assets)
        return mul_div(shares, self.total_assets + assets + 1, self.total_shares + shares + 1)

    def deposit(self, owner: str, assets: int) -> int:
        shares = self.convert_to_shares(assets)
        self.total_assets += assets
        self.total_shares += shares
        self._shares[owner] = self.shares_of(owner) + shares
        return shares

    def withdraw(self, owner: str, assets: int) -> int:
        if assets > self.max_withdraw(owner):
            raise ValueError(f"withdraw {assets} exceeds max withdraw for {owner}.")
        shares = min(self.convert_to_shares(assets, Rounding.UP), self.shares_of(owner))
        self.total_assets -= assets
        self.total_shares -= shares
        self._shares[owner] = self.shares_of(owner) - shares
        return shares

    def accrue(self, amount: int) -> None:
        """Positive or negative change in the vault's underlying assets."""
        self.total_assets = max(0, self.total_assets + amount)


class ShareVaultYieldSource:
    """Adapter holding a position in a ``ShareVault`` on behalf of ``owner``."""

    def __init__(self, *, address: str, vault: ShareVault, owner: str):
        self._address = address
        self._vault = vault
        self._owner = owner

    @property
    def address(self) -> str:
        return self._address

    @property
    def asset(self) -> str:
        return self._vault.asset

    def deposit(self, amount: int) -> int:
        if amount <= 0:
            return 0
        return self._vault.deposit(self._owner, amount)

    def preview_deposit(self, amount: int) -> int:
        if amount <= 0:
            return 0
        return self._vault.preview_deposit(amount)

    def withdraw(self, amount: int) -> int:
        amount = min(amount, self._vault.max_withdraw(self._owner))
        if amount <= 0:
            return 0
        self._vault.withdraw(self._owner, amount)
        return amount

    def total_assets(self) -> int:
        return self._vault.max_withdraw(self._owner)
