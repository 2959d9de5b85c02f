"""FastAPI endpoints for the memorial shop — products, carts and orders."""

import json

from fastapi import APIRouter, Header, HTTPException, Query
from protean.utils.globals import current_domain

from memorials.api.routes import paginated
from memorials.api.schemas import (
    AddCartItemRequest,
    AdjustStockRequest,
    CreateCartRequest,
    CreateProductRequest,
    IdResponse,
    OrderStatusRequest,
    StatusResponse,
    UpdateProductRequest,
    VariantSchema,
)
from memorials.cart.cart import Cart
from memorials.cart.management import AddCartItem, CreateCart, DeleteCart, RemoveCartItem
from memorials.order.fulfillment import AdvanceFulfilment, CancelOrderItem, DeleteOrder
from memorials.order.order import Order
from memorials.product.creation import CreateProduct
from memorials.product.maintenance import (
    ActivateProduct,
    AddVariant,
    AdjustStock,
    DeactivateProduct,
    DeleteProduct,
    UpdateProductDetails,
)
from memorials.product.product import Product

product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/carts", tags=["carts"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


def product_view(product: Product) -> dict:
    return {**product.to_dict(), "highlights": product.highlight_list(), "images": product.image_list()}


def cart_view(cart: Cart) -> dict:
    return {**cart.to_dict(), "subtotal": float(cart.subtotal)}


def _json_list(values) -> str | None:
    return json.dumps(values) if values is not None else None


# --- Product endpoints ---


@product_router.get("/memorial")
async def memorial_products(type: str | None = None) -> list[dict]:
    return [product_view(p) for p in current_domain.repository_for(Product).memorial_products(type)]


@product_router.get("/search/{name}")
async def search_products(name: str) -> list[dict]:
    return [product_view(p) for p in current_domain.repository_for(Product).search_by_name(name)]


@product_router.get("/item/{slug}")
async def product_by_slug(slug: str) -> dict:
    return product_view(current_domain.repository_for(Product).active_by_slug(slug))


@product_router.get("/id/{product_id}")
async def product_by_id(product_id: str) -> dict:
    return product_view(current_domain.repository_for(Product).get(product_id))


@product_router.post("", status_code=201, response_model=IdResponse)
async def create_product(body: CreateProductRequest) -> IdResponse:
    variants = [v.model_dump(exclude_none=True) for v in body.variants] if body.variants else None
    command = CreateProduct(
        sku=body.sku,
        name=body.name,
        product_type=body.product_type,
        slug=body.slug,
        description=body.description,
        highlights=_json_list(body.highlights),
        images=_json_list(body.images),
        variants=_json_list(variants),
        taxable=body.taxable,
        brand_id=body.brand_id,
        stock_quantity=body.stock_quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(product_id: str, body: UpdateProductRequest) -> StatusResponse:
    command = UpdateProductDetails(
        product_id=product_id,
        name=body.name,
        description=body.description,
        highlights=_json_list(body.highlights),
        images=_json_list(body.images),
        taxable=body.taxable,
        brand_id=body.brand_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.post("/{product_id}/variants", status_code=201, response_model=IdResponse)
async def add_variant(product_id: str, body: VariantSchema) -> IdResponse:
    command = AddVariant(
        product_id=product_id,
        name=body.name,
        price=body.price,
        quantity=body.quantity,
        compare_at_price=body.compare_at_price,
        sku=body.sku,
        is_default=body.is_default,
    )
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@product_router.post("/{product_id}/stock")
async def adjust_stock(product_id: str, body: AdjustStockRequest) -> dict:
    command = AdjustStock(
        product_id=product_id,
        delta=body.delta,
        **({"reason": body.reason} if body.reason else {}),
    )
    stock = current_domain.process(command, asynchronous=False)
    return {"product_id": product_id, "stock_quantity": stock}


@product_router.put("/{product_id}/activate", response_model=StatusResponse)
async def activate_product(product_id: str) -> StatusResponse:
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str) -> StatusResponse:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


# --- Cart endpoints ---


@cart_router.post("", status_code=201, response_model=IdResponse)
async def create_cart(body: CreateCartRequest, x_user_id: str | None = Header(None)) -> IdResponse:
    products = [p.model_dump(exclude_none=True) for p in body.products]
    command = CreateCart(user_id=x_user_id, products=json.dumps(products))
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@cart_router.post("/{cart_id}/items", response_model=StatusResponse)
async def add_cart_item(cart_id: str, body: AddCartItemRequest) -> StatusResponse:
    command = AddCartItem(
        cart_id=cart_id,
        product_id=body.product_id,
        quantity=body.quantity,
        variant_name=body.variant_name,
        price=body.price,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, product_id: str) -> StatusResponse:
    current_domain.process(RemoveCartItem(cart_id=cart_id, product_id=product_id), asynchronous=False)
    return StatusResponse()


@cart_router.get("/{cart_id}")
async def get_cart(cart_id: str) -> dict:
    return cart_view(current_domain.repository_for(Cart).get(cart_id))


@cart_router.delete("/{cart_id}", response_model=StatusResponse)
async def delete_cart(cart_id: str) -> StatusResponse:
    current_domain.process(DeleteCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


# --- Order endpoints ---


@order_router.get("")
async def list_orders(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100)) -> dict:
    result = current_domain.repository_for(Order).page(page, limit)
    return paginated(result, page, limit, "orders", lambda o: o.to_dict())


@order_router.get("/me")
async def my_orders(x_user_id: str | None = Header(None)) -> list[dict]:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return [o.to_dict() for o in current_domain.repository_for(Order).for_user(x_user_id)]


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    order = current_domain.repository_for(Order).get(order_id)
    cart = current_domain.repository_for(Cart).find(order.cart_id)
    return {**order.to_dict(), "items": cart.to_dict()["items"] if cart else []}


@order_router.put("/{order_id}/status")
async def update_order_status(order_id: str, body: OrderStatusRequest) -> dict:
    command = AdvanceFulfilment(order_id=order_id, status=body.status)
    return current_domain.process(command, asynchronous=False)


@order_router.put("/{order_id}/items/{item_id}/cancel")
async def cancel_order_item(order_id: str, item_id: str) -> dict:
    command = CancelOrderItem(order_id=order_id, item_id=item_id)
    return current_domain.process(command, asynchronous=False)


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str) -> StatusResponse:
    current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)
    return StatusResponse()
