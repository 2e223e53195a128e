from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


# Authorization


class AccessDeniedError(DomainError):
    """The permission gate rejected the caller for a capability."""

    def __init__(self, capability: str, caller: str):
        super().__init__(f"Caller {caller} lacks capability '{capability}'.")
        self.capability = capability
        self.caller = caller


class InvalidCallerError(DomainError):
    """Callback did not originate from the bound host runtime."""

    def __init__(self, caller: str):
        super().__init__(f"Invalid caller {caller}.")
        self.caller = caller


# State


class PoolPausedError(DomainError):
    """Pool is inactive."""


class ProtocolPausedError(DomainError):
    """Protocol-wide pause is in effect."""


class PoolNotConfiguredError(DomainError):
    """Pool was never configured."""


class PoolAlreadyConfiguredError(DomainError):
    """The hook already serves a pool."""


class LogicNotSetError(DomainError):
    """No logic unit is wired to the hook."""


class CooldownNotElapsedError(DomainError):
    def __init__(self, pool_id: str, next_allowed_time: int, min_period: int):
        super().__init__(
            f"Cooldown not elapsed for pool {pool_id}: next adjustment at {next_allowed_time} "
            f"(min period {min_period}s)."
        )
        self.pool_id = pool_id
        self.next_allowed_time = next_allowed_time
        self.min_period = min_period


class ReentrancyError(DomainError):
    """Nested entry into a guarded operation."""


# Validation


class InvalidFeeError(DomainError):
    def __init__(self, fee: int):
        super().__init__(f"Invalid fee {fee}.")
        self.fee = fee


class InvalidRatioError(DomainError):
    def __init__(self, ratio: int):
        super().__init__(f"Invalid ratio {ratio}.")
        self.ratio = ratio


class InvalidParameterError(DomainError):
    """Parameter outside its allowed bounds."""


class InvalidAddressError(DomainError):
    def __init__(self, address: str | None):
        super().__init__(f"Invalid address {address!r}.")
        self.address = address


class ZeroSharesError(DomainError):
    def __init__(self):
        super().__init__("Shares must be greater than zero.")


class InsufficientSharesError(DomainError):
    def __init__(self, requested: int, available: int):
        super().__init__(f"Requested {requested} shares but only {available} available.")
        self.requested = requested
        self.available = available


class InvalidYieldSourceError(DomainError):
    def __init__(self, address: str | None):
        super().__init__(f"Invalid yield source {address!r}.")
        self.address = address


class YieldSourceNotSetError(DomainError):
    def __init__(self, currency: str):
        super().__init__(f"No yield source set for currency {currency}.")
        self.currency = currency


class YieldSourceMigrationError(DomainError):
    """Migration lost more value than the configured tolerance."""


class InvalidTickRangeError(DomainError):
    def __init__(self, tick_lower: int, tick_upper: int):
        super().__init__(f"Invalid tick range [{tick_lower}, {tick_upper}).")
        self.tick_lower = tick_lower
        self.tick_upper = tick_upper


class InvalidYieldTaxError(DomainError):
    def __init__(self, pips: int):
        super().__init__(f"Invalid yield tax {pips} pips.")
        self.pips = pips
