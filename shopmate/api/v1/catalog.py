from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from shopmate.api.v1.schemas import OrderSchema, OrderStatusUpdateSchema, ProductSchema
from shopmate.application.exceptions import CatalogError, OrderStoreError
from shopmate.application.ports.catalog import CatalogPort
from shopmate.application.use_cases.manage_orders import ManageOrdersUseCase
from shopmate.wiring.dependencies import get_catalog, get_manage_orders_use_case

router = APIRouter()


@router.get("/products", response_model=list[ProductSchema])
def list_products(catalog: CatalogPort = Depends(get_catalog)):
    try:
        return [ProductSchema.from_entity(p) for p in catalog.list_products()]
    except CatalogError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/orders", response_model=list[OrderSchema])
def list_orders(uc: ManageOrdersUseCase = Depends(get_manage_orders_use_case)):
    try:
        return [OrderSchema.from_entity(order, product) for order, product in uc.list_with_products()]
    except OrderStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.patch("/orders/{order_id}", response_model=OrderSchema)
def update_order_status(
    order_id: str,
    req: OrderStatusUpdateSchema,
    uc: ManageOrdersUseCase = Depends(get_manage_orders_use_case),
):
    try:
        order = uc.update_status(order_id, req.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OrderStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderSchema.from_entity(order)
