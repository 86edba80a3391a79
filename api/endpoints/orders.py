import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from core.gates import get_current_user
from models.models_user import User
from schemas.inventory import PageQuery, PageResult
from services.inventory import InventoryGateway

logger = logging.getLogger(__name__)

router = APIRouter()


def get_inventory_gateway(request: Request) -> InventoryGateway:
    return request.app.state.inventory


@router.get("/orders", response_model=PageResult)
def list_orders(
    page: Optional[int] = Query(None),
    size: Optional[int] = Query(None),
    sorting_field: Optional[str] = Query(None),
    sorting_dir: Optional[str] = Query(None),
    user: User = Depends(get_current_user),
    gateway: InventoryGateway = Depends(get_inventory_gateway),
):
    if not user.customer_name:
        # no tenant on the principal: the listing covers every customer
        logger.info("unscoped inventory listing by user id=%s", user.id)
    q = PageQuery(page=page, size=size, sorting_field=sorting_field, sorting_dir=sorting_dir)
    return gateway.list_page(user.customer_name, q)
