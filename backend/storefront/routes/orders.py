# Overview: Flask API routes for orders; parses input and returns JSON responses.

"""
Order Routes

SECURITY: All routes require authentication.
- Guests see and act on their own orders only; list endpoints are
  narrowed to the caller's orders.
- Only admins (managers) change order status; the caller becomes the
  order's manager.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import StorefrontError
from ..services import order_service
from ..services.auth_service import ROLE_ADMIN, ROLE_GUEST
from ..validation import (
    optional_text,
    parse_id_list,
    parse_optional_positive_int,
    parse_order_status,
    parse_page,
    parse_status_target,
)


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _json_error(exc: Exception):
    if isinstance(exc, StorefrontError):
        return jsonify(exc.to_dict()), exc.http_status
    current_app.logger.exception("Unexpected error in order route")
    return jsonify({"error": "Internal server error"}), 500


def _is_admin() -> bool:
    return ROLE_ADMIN in g.roles


def _client_scope():
    """client_id a guest is confined to; None for admins."""
    return None if _is_admin() else g.current_person.id


def _can_access(order) -> bool:
    return _is_admin() or order.client_id == g.current_person.id


def _list_response(orders):
    return jsonify({
        "items": [order_service.order_to_dict(o) for o in orders],
        "count": len(orders),
    })


@orders_bp.post("")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def create_order_route():
    """
    Create an order from cart items.

    Request body:
    {
        "client_id": 7,              // optional, defaults to the caller
        "cart_item_ids": [11, 12],   // required, non-empty
        "details": "leave at door"   // optional
    }

    Returns:
        Order (status "InProgress") with its items
    """
    data = request.get_json(silent=True) or {}
    try:
        client_id = parse_optional_positive_int(data.get("client_id"), "client_id") or g.current_person.id
        if client_id != g.current_person.id and not _is_admin():
            return jsonify({"error": "Access denied"}), 403
        cart_item_ids = parse_id_list(data.get("cart_item_ids"), "cart_item_ids")
        details = optional_text(data.get("details"), "details")

        order = order_service.create_order(client_id, cart_item_ids, details=details)
        return jsonify(order_service.order_to_dict(order, include_items=True)), 201
    except Exception as e:
        return _json_error(e)


@orders_bp.post("/search")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def search_orders_route():
    """
    Search orders.

    Request body (all optional):
    {
        "client_id": 7,
        "manager_id": 2,
        "status": "Approved",
        "limit": 50,
        "offset": 0
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        client_id = parse_optional_positive_int(data.get("client_id"), "client_id")
        scope = _client_scope()
        if scope is not None:
            if client_id is not None and client_id != scope:
                return jsonify({"error": "Access denied"}), 403
            client_id = scope
        manager_id = parse_optional_positive_int(data.get("manager_id"), "manager_id")
        status = parse_order_status(data["status"]) if data.get("status") is not None else None
        limit, offset = parse_page(data.get("limit"), data.get("offset"))

        orders = order_service.search_orders(
            client_id=client_id,
            manager_id=manager_id,
            status=status,
            limit=limit,
            offset=offset,
        )
        return jsonify({
            "items": [order_service.order_to_dict(o) for o in orders],
            "count": len(orders),
            "limit": limit,
            "offset": offset,
        })
    except Exception as e:
        return _json_error(e)


@orders_bp.get("/<int:order_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        if not _can_access(order):
            return jsonify({"error": "Access denied"}), 403
        return jsonify(order_service.order_to_dict(order, include_items=True))
    except Exception as e:
        return _json_error(e)


@orders_bp.get("/<int:order_id>/items")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def list_order_items_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        if not _can_access(order):
            return jsonify({"error": "Access denied"}), 403
        items = order_service.list_order_items(order_id)
        return jsonify({
            "items": [order_service.order_item_to_dict(i) for i in items],
            "count": len(items),
        })
    except Exception as e:
        return _json_error(e)


@orders_bp.patch("/<int:order_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def update_order_route(order_id: int):
    """Edit details of an InProgress order. Body: {"details": "..."}"""
    data = request.get_json(silent=True) or {}
    try:
        details = optional_text(data.get("details"), "details")
        order = order_service.get_order(order_id)
        if not _can_access(order):
            return jsonify({"error": "Access denied"}), 403
        order = order_service.update_order_details(order_id, details)
        return jsonify(order_service.order_to_dict(order))
    except Exception as e:
        return _json_error(e)


@orders_bp.post("/<int:order_id>/status/<target>")
@require_auth
@require_role(ROLE_ADMIN)
def change_order_status_route(order_id: int, target: str):
    """
    Approve or cancel an order. The caller is recorded as its manager.

    Approval debits stock for every line or for none of them.
    """
    try:
        target_status = parse_status_target(target)
        order = order_service.change_order_status(order_id, g.current_person.id, target_status)
        return jsonify(order_service.order_to_dict(order, include_items=True))
    except Exception as e:
        return _json_error(e)


@orders_bp.delete("/<int:order_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def delete_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        if not _can_access(order):
            return jsonify({"error": "Access denied"}), 403
        order_service.delete_order(order_id)
        return jsonify({"deleted": True, "id": order_id})
    except Exception as e:
        return _json_error(e)


@orders_bp.get("/client/<int:client_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def list_by_client_route(client_id: int):
    scope = _client_scope()
    if scope is not None and scope != client_id:
        return jsonify({"error": "Access denied"}), 403
    try:
        return _list_response(order_service.list_by_client(client_id))
    except Exception as e:
        return _json_error(e)


@orders_bp.get("/manager/<int:manager_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def list_by_manager_route(manager_id: int):
    try:
        return _list_response(order_service.search_orders(manager_id=manager_id, client_id=_client_scope()))
    except Exception as e:
        return _json_error(e)


@orders_bp.get("/status/<status>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def list_by_status_route(status: str):
    try:
        status = parse_order_status(status)
        return _list_response(order_service.search_orders(status=status, client_id=_client_scope()))
    except Exception as e:
        return _json_error(e)


@orders_bp.get("/manager/<int:manager_id>/status/<status>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def list_by_manager_and_status_route(manager_id: int, status: str):
    try:
        status = parse_order_status(status)
        return _list_response(order_service.search_orders(
            manager_id=manager_id,
            status=status,
            client_id=_client_scope(),
        ))
    except Exception as e:
        return _json_error(e)
