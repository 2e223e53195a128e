from __future__ import annotations

from fastapi import HTTPException

from alphix.domain.exceptions import (
    AccessDeniedError,
    CooldownNotElapsedError,
    DomainError,
    InvalidCallerError,
    LogicNotSetError,
    PoolAlreadyConfiguredError,
    PoolNotConfiguredError,
    PoolPausedError,
    ProtocolPausedError,
    ReentrancyError,
    YieldSourceMigrationError,
    YieldSourceNotSetError,
)


_FORBIDDEN = (AccessDeniedError, InvalidCallerError)
_CONFLICT = (
    PoolPausedError,
    ProtocolPausedError,
    PoolAlreadyConfiguredError,
    LogicNotSetError,
    ReentrancyError,
    YieldSourceNotSetError,
    YieldSourceMigrationError,
)


def to_http_exception(exc: DomainError) -> HTTPException:
    if isinstance(exc, _FORBIDDEN):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, PoolNotConfiguredError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, CooldownNotElapsedError):
        return HTTPException(
            status_code=409,
            detail={
                "message": str(exc),
                "code": "cooldown_not_elapsed",
                "next_allowed_time": exc.next_allowed_time,
            },
        )
    if isinstance(exc, _CONFLICT):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
