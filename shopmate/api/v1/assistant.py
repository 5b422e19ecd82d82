from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from shopmate.api.v1.schemas import (
    AnalyzeImageResponseSchema,
    ChatRequestSchema,
    ChatResponseSchema,
    CreateOrderRequestSchema,
    CreateOrderResponseSchema,
    ImageRequestSchema,
    ProductSchema,
)
from shopmate.application.exceptions import (
    CatalogError,
    DuplicateOrderError,
    LLMContractError,
    LLMUpstreamError,
    OrderStoreError,
    ProductNotFoundError,
)
from shopmate.application.use_cases.converse import ConverseUseCase
from shopmate.application.use_cases.create_order import CreateOrderUseCase
from shopmate.application.use_cases.match_product import MatchProductUseCase
from shopmate.wiring.dependencies import (
    get_converse_use_case,
    get_create_order_use_case,
    get_match_product_use_case,
)

router = APIRouter()
logger = logging.getLogger(__name__)

UPSTREAM_ERRORS = (LLMUpstreamError, LLMContractError, CatalogError, OrderStoreError)


@router.post("/analyze-image", response_model=AnalyzeImageResponseSchema)
def analyze_image(
    req: ImageRequestSchema,
    uc: MatchProductUseCase = Depends(get_match_product_use_case),
):
    try:
        image, mime = req.decode()
        result = uc.execute(image, mime)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UPSTREAM_ERRORS as e:
        logger.error("Image analysis failed", extra={"reason": str(e)})
        raise HTTPException(status_code=502, detail=str(e))

    if result.product is None:
        return AnalyzeImageResponseSchema(found_product=None, message=result.reason)
    return AnalyzeImageResponseSchema(found_product=ProductSchema.from_entity(result.product))


@router.post("/chat", response_model=ChatResponseSchema, response_model_exclude_none=True)
def chat(
    req: ChatRequestSchema,
    uc: ConverseUseCase = Depends(get_converse_use_case),
):
    try:
        reply = uc.execute(
            active_product=req.product_context.to_entity() if req.product_context else None,
            history=[m.to_turn() for m in req.chat_history],
            user_message=req.user_message,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UPSTREAM_ERRORS as e:
        logger.error("Chat failed", extra={"reason": str(e)})
        raise HTTPException(status_code=502, detail=f"An unexpected error occurred: {e}")

    return ChatResponseSchema(reply=reply.reply, intent=reply.intent.value if reply.intent else None)


@router.post("/create-order", response_model=CreateOrderResponseSchema, response_model_exclude_none=True)
def create_order(
    req: CreateOrderRequestSchema,
    uc: CreateOrderUseCase = Depends(get_create_order_use_case),
):
    try:
        order = uc.execute(
            product_id=req.product_id,
            customer_details_text=req.customer_details_text,
            idempotency_key=req.idempotency_key,
        )
    except ValueError as e:
        return _order_error(400, str(e))
    except ProductNotFoundError as e:
        return _order_error(404, str(e))
    except DuplicateOrderError as e:
        return _order_error(409, str(e), order_id=e.order.id)
    except UPSTREAM_ERRORS as e:
        logger.error("Order creation failed", extra={"reason": str(e)})
        return _order_error(502, str(e))

    return CreateOrderResponseSchema(success=True, order_id=order.id)


def _order_error(status_code: int, error: str, order_id: str | None = None) -> JSONResponse:
    body = CreateOrderResponseSchema(success=False, order_id=order_id, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))
