from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header

from alphix.api.auth import get_caller
from alphix.api.deps import (
    get_add_liquidity_use_case,
    get_collect_tax_use_case,
    get_get_vault_use_case,
    get_preview_add_liquidity_use_case,
    get_preview_remove_liquidity_use_case,
    get_remove_liquidity_use_case,
    get_set_tick_range_use_case,
    get_set_yield_source_use_case,
    get_set_yield_tax_use_case,
    get_set_yield_treasury_use_case,
)
from alphix.api.errors import to_http_exception
from alphix.api.schemas.rehypothecation import (
    CollectTaxResponse,
    CurrencyResponse,
    LiquidityAmountsResponse,
    SetYieldSourceRequest,
    SharesRequest,
    TickRangeRequest,
    TickRangeResponse,
    VaultResponse,
    YieldSourceResponse,
    YieldTaxRequest,
    YieldTaxResponse,
    YieldTreasuryRequest,
    YieldTreasuryResponse,
)
from alphix.application.dto.rehypothecation import (
    CurrencyOutput,
    LiquidityAmountsOutput,
    LiquidityInput,
    SetTickRangeInput,
    SetYieldSourceInput,
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
from alphix.application.use_cases.set_tick_range import SetTickRangeUseCase
from alphix.application.use_cases.set_yield_source import SetYieldSourceUseCase
from alphix.application.use_cases.set_yield_tax import SetYieldTaxUseCase
from alphix.application.use_cases.set_yield_treasury import SetYieldTreasuryUseCase
from alphix.domain.exceptions import DomainError

router = APIRouter()
logger = logging.getLogger(__name__)


def _currency(output: CurrencyOutput) -> CurrencyResponse:
    return CurrencyResponse(
        currency=output.currency,
        yield_source=output.yield_source,
        amount_in_yield_source=output.amount_in_yield_source,
        accumulated_tax=output.accumulated_tax,
    )


def _amounts(output: LiquidityAmountsOutput) -> LiquidityAmountsResponse:
    return LiquidityAmountsResponse(shares=output.shares, amount0=output.amount0, amount1=output.amount1)


@router.get("/v1/rehypothecation", response_model=VaultResponse)
def get_vault(
    x_caller_address: str | None = Header(None),
    use_case: GetVaultUseCase = Depends(get_get_vault_use_case),
):
    try:
        output = use_case.execute(holder=x_caller_address or None)
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return VaultResponse(
        pool_id=output.pool_id,
        tick_lower=output.tick_lower,
        tick_upper=output.tick_upper,
        yield_tax_pips=output.yield_tax_pips,
        yield_treasury=output.yield_treasury,
        total_supply=output.total_supply,
        currency0=_currency(output.currency0),
        currency1=_currency(output.currency1),
        caller_balance=output.caller_balance,
    )


@router.get("/v1/rehypothecation/preview-add", response_model=LiquidityAmountsResponse)
def preview_add(
    shares: int,
    use_case: PreviewAddLiquidityUseCase = Depends(get_preview_add_liquidity_use_case),
):
    try:
        return _amounts(use_case.execute(shares=shares))
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.get("/v1/rehypothecation/preview-remove", response_model=LiquidityAmountsResponse)
def preview_remove(
    shares: int,
    use_case: PreviewRemoveLiquidityUseCase = Depends(get_preview_remove_liquidity_use_case),
):
    try:
        return _amounts(use_case.execute(shares=shares))
    except DomainError as exc:
        raise to_http_exception(exc) from exc


@router.post("/v1/rehypothecation/add", response_model=LiquidityAmountsResponse)
def add_liquidity(
    req: SharesRequest,
    caller: str = Depends(get_caller),
    use_case: AddReHypothecatedLiquidityUseCase = Depends(get_add_liquidity_use_case),
):
    try:
        output = use_case.execute(LiquidityInput(caller=caller, shares=req.shares))
    except DomainError as exc:
        logger.warning("rehypothecation_router: add_rejected caller=%s shares=%s detail=%s", caller, req.shares, exc)
        raise to_http_exception(exc) from exc
    return _amounts(output)


@router.post("/v1/rehypothecation/remove", response_model=LiquidityAmountsResponse)
def remove_liquidity(
    req: SharesRequest,
    caller: str = Depends(get_caller),
    use_case: RemoveReHypothecatedLiquidityUseCase = Depends(get_remove_liquidity_use_case),
):
    try:
        output = use_case.execute(LiquidityInput(caller=caller, shares=req.shares))
    except DomainError as exc:
        logger.warning(
            "rehypothecation_router: remove_rejected caller=%s shares=%s detail=%s",
            caller,
            req.shares,
            exc,
        )
        raise to_http_exception(exc) from exc
    return _amounts(output)


@router.post("/v1/rehypothecation/collect-tax", response_model=CollectTaxResponse)
def collect_tax(use_case: CollectAccumulatedTaxUseCase = Depends(get_collect_tax_use_case)):
    try:
        output = use_case.execute()
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return CollectTaxResponse(collected0=output.collected0, collected1=output.collected1)


@router.put("/v1/rehypothecation/yield-source", response_model=YieldSourceResponse)
def set_yield_source(
    req: SetYieldSourceRequest,
    caller: str = Depends(get_caller),
    use_case: SetYieldSourceUseCase = Depends(get_set_yield_source_use_case),
):
    try:
        address = use_case.execute(
            SetYieldSourceInput(caller=caller, currency=req.currency, yield_source=req.yield_source)
        )
    except DomainError as exc:
        logger.warning(
            "rehypothecation_router: yield_source_rejected caller=%s currency=%s detail=%s",
            caller,
            req.currency,
            exc,
        )
        raise to_http_exception(exc) from exc
    return YieldSourceResponse(currency=req.currency, yield_source=address)


@router.put("/v1/rehypothecation/tick-range", response_model=TickRangeResponse)
def set_tick_range(
    req: TickRangeRequest,
    caller: str = Depends(get_caller),
    use_case: SetTickRangeUseCase = Depends(get_set_tick_range_use_case),
):
    try:
        tick_lower, tick_upper = use_case.execute(
            SetTickRangeInput(caller=caller, tick_lower=req.tick_lower, tick_upper=req.tick_upper)
        )
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return TickRangeResponse(tick_lower=tick_lower, tick_upper=tick_upper)


@router.put("/v1/rehypothecation/yield-tax", response_model=YieldTaxResponse)
def set_yield_tax(
    req: YieldTaxRequest,
    caller: str = Depends(get_caller),
    use_case: SetYieldTaxUseCase = Depends(get_set_yield_tax_use_case),
):
    try:
        pips = use_case.execute(SetYieldTaxInput(caller=caller, yield_tax_pips=req.yield_tax_pips))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return YieldTaxResponse(yield_tax_pips=pips)


@router.put("/v1/rehypothecation/yield-treasury", response_model=YieldTreasuryResponse)
def set_yield_treasury(
    req: YieldTreasuryRequest,
    caller: str = Depends(get_caller),
    use_case: SetYieldTreasuryUseCase = Depends(get_set_yield_treasury_use_case),
):
    try:
        treasury = use_case.execute(SetYieldTreasuryInput(caller=caller, yield_treasury=req.yield_treasury))
    except DomainError as exc:
        raise to_http_exception(exc) from exc
    return YieldTreasuryResponse(yield_treasury=treasury)
