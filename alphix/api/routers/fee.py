from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from alphix.api.auth import get_caller
from alphix.api.deps import (
    get_get_pool_fee_use_case,
    get_poke_fee_use_case,
    get_set_global_max_adj_rate_use_case,
    get_set_pool_params_use_case,
)
from alphix.api.errors import to_http_exception
from alphix.api.schemas.fee import (
    FeeResponse,
    GlobalMaxAdjRateRequest,
    GlobalMaxAdjRateResponse,
    PokeFeeRequest,
    PokeFeeResponse,
    PoolParamsSchema,
)
from alphix.application.dto.fee import PokeFeeInput, SetGlobalMaxAdjRateInput, SetPoolParamsInput
from alphix.application.use_cases.get_pool_fee import GetPoolFeeUseCase
from alphix.application.use_cases.poke_fee import PokeFeeUseCase
from alphix.application.use_cases.set_global_max_adj_rate import SetGlobalMaxAdjRateUseCase
from alphix.application.use_cases.set_pool_params import SetPoolParamsUseCase
from alphix.domain.exceptions import CooldownNotElapsedError, DomainError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/v1/fee", response_model=FeeResponse)
def get_fee(use_case: GetPoolFeeUseCase = Depends(get_get_pool_fee_use_case)):
    try:
        output = use_case.execute()
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return FeeResponse(
        pool_id=output.pool_id,
        current_fee=output.current_fee,
        current_target_ratio=output.current_target_ratio,
        last_adjustment_timestamp=output.last_adjustment_timestamp,
        next_adjustment_time=output.next_adjustment_time,
        global_max_adj_rate=output.global_max_adj_rate,
        params=PoolParamsSchema.from_entity(output.params),
    )


@router.post("/v1/fee/poke", response_model=PokeFeeResponse)
def poke_fee(
    req: PokeFeeRequest,
    caller: str = Depends(get_caller),
    use_case: PokeFeeUseCase = Depends(get_poke_fee_use_case),
):
    try:
        output = use_case.execute(PokeFeeInput(caller=caller, current_ratio=req.current_ratio))
    except CooldownNotElapsedError as exc:
        logger.info(
            "fee_router: cooldown pool=%s next_allowed_time=%s",
            exc.pool_id,
            exc.next_allowed_time,
        )
        raise to_http_exception(exc) from exc
    except DomainError as exc:
        logger.warning("fee_router: poke_rejected caller=%s ratio=%s detail=%s", caller, req.current_ratio, exc)
        raise to_http_exception(exc) from exc
    return PokeFeeResponse(
        pool_id=output.pool_id,
        old_fee=output.old_fee,
        new_fee=output.new_fee,
        old_target_ratio=output.old_target_ratio,
        new_target_ratio=output.new_target_ratio,
        timestamp=output.timestamp,
        within_tolerance=output.within_tolerance,
    )


@router.get("/v1/fee/params", response_model=PoolParamsSchema)
def get_params(use_case: GetPoolFeeUseCase = Depends(get_get_pool_fee_use_case)):
    try:
        output = use_case.execute()
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return PoolParamsSchema.from_entity(output.params)


@router.put("/v1/fee/params", response_model=PoolParamsSchema)
def set_params(
    req: PoolParamsSchema,
    caller: str = Depends(get_caller),
    use_case: SetPoolParamsUseCase = Depends(get_set_pool_params_use_case),
):
    try:
        params = use_case.execute(SetPoolParamsInput(caller=caller, params=req.to_entity()))
    except DomainError as exc:
        logger.warning("fee_router: params_rejected caller=%s detail=%s", caller, exc)
        raise to_http_exception(exc) from exc
    return PoolParamsSchema.from_entity(params)


@router.put("/v1/fee/global-max-adj-rate", response_model=GlobalMaxAdjRateResponse)
def set_global_max_adj_rate(
    req: GlobalMaxAdjRateRequest,
    caller: str = Depends(get_caller),
    use_case: SetGlobalMaxAdjRateUseCase = Depends(get_set_global_max_adj_rate_use_case),
):
    try:
        rate = use_case.execute(SetGlobalMaxAdjRateInput(caller=caller, rate=req.rate))
    except DomainError as exc:
        logger.warning("fee_router: global_rate_rejected caller=%s rate=%s detail=%s", caller, req.rate, exc)
        raise to_http_exception(exc) from exc
    return GlobalMaxAdjRateResponse(global_max_adj_rate=rate)
