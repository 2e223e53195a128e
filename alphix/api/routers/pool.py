from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from alphix.api.auth import get_caller
from alphix.api.deps import (
    get_get_pool_use_case,
    get_initialize_pool_use_case,
    get_set_pool_status_use_case,
    get_set_protocol_pause_use_case,
)
from alphix.api.errors import to_http_exception
from alphix.api.schemas.pool import InitializePoolRequest, PoolResponse, ProtocolPauseResponse
from alphix.application.dto.pool import (
    InitializePoolInput,
    PoolOutput,
    SetPoolStatusInput,
    SetProtocolPauseInput,
)
from alphix.application.use_cases.get_pool import GetPoolUseCase
from alphix.application.use_cases.initialize_pool import InitializePoolUseCase
from alphix.application.use_cases.set_pool_status import SetPoolStatusUseCase
from alphix.application.use_cases.set_protocol_pause import SetProtocolPauseUseCase
from alphix.domain.entities.pool import PoolKey
from alphix.domain.exceptions import DomainError

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_response(output: PoolOutput) -> PoolResponse:
    return PoolResponse(
        pool_id=output.pool_id,
        pool_type=output.pool_type,
        status=output.status,
        lifecycle_state=output.lifecycle_state,
        current_fee=output.current_fee,
        current_target_ratio=output.current_target_ratio,
        last_adjustment_timestamp=output.last_adjustment_timestamp,
    )


@router.get("/v1/pool", response_model=PoolResponse)
def get_pool(use_case: GetPoolUseCase = Depends(get_get_pool_use_case)):
    try:
        return _to_response(use_case.execute())
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.post("/v1/pool", response_model=PoolResponse)
def initialize_pool(
    req: InitializePoolRequest,
    caller: str = Depends(get_caller),
    use_case: InitializePoolUseCase = Depends(get_initialize_pool_use_case),
):
    try:
        output = use_case.execute(
            InitializePoolInput(
                caller=caller,
                key=PoolKey(
                    currency0=req.key.currency0,
                    currency1=req.key.currency1,
                    fee=req.key.fee,
                    tick_spacing=req.key.tick_spacing,
                    hooks=req.key.hooks,
                ),
                initial_fee=req.initial_fee,
                initial_target_ratio=req.initial_target_ratio,
                pool_type=req.pool_type,
                sqrt_price_x96=req.sqrt_price_x96,
                params=req.params.to_entity() if req.params is not None else None,
            )
        )
    except DomainError as exc:
        logger.warning("pool_router: initialize_rejected caller=%s detail=%s", caller, exc)
        raise to_http_exception(exc) from exc
    return _to_response(output)


def _set_status(use_case: SetPoolStatusUseCase, caller: str, active: bool) -> PoolResponse:
    try:
        output = use_case.execute(SetPoolStatusInput(caller=caller, active=active))
    except DomainError as exc:
        logger.warning(
            "pool_router: status_rejected caller=%s active=%s detail=%s",
            caller,
            active,
            exc,
        )
        raise to_http_exception(exc) from exc
    return _to_response(output)


@router.post("/v1/pool/activate", response_model=PoolResponse)
def activate_pool(
    caller: str = Depends(get_caller),
    use_case: SetPoolStatusUseCase = Depends(get_set_pool_status_use_case),
):
    return _set_status(use_case, caller, True)


@router.post("/v1/pool/deactivate", response_model=PoolResponse)
def deactivate_pool(
    caller: str = Depends(get_caller),
    use_case: SetPoolStatusUseCase = Depends(get_set_pool_status_use_case),
):
    return _set_status(use_case, caller, False)


def _set_pause(use_case: SetProtocolPauseUseCase, caller: str, paused: bool) -> ProtocolPauseResponse:
    try:
        result = use_case.execute(SetProtocolPauseInput(caller=caller, paused=paused))
    except DomainError as exc:
        logger.warning("pool_router: pause_rejected caller=%s paused=%s detail=%s", caller, paused, exc)
        raise to_http_exception(exc) from exc
    return ProtocolPauseResponse(paused=result)


@router.post("/v1/protocol/pause", response_model=ProtocolPauseResponse)
def pause_protocol(
    caller: str = Depends(get_caller),
    use_case: SetProtocolPauseUseCase = Depends(get_set_protocol_pause_use_case),
):
    return _set_pause(use_case, caller, True)


@router.post("/v1/protocol/unpause", response_model=ProtocolPauseResponse)
def unpause_protocol(
    caller: str = Depends(get_caller),
    use_case: SetProtocolPauseUseCase = Depends(get_set_protocol_pause_use_case),
):
    return _set_pause(use_case, caller, False)
