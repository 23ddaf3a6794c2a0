# Overview: Flask API routes for carts and cart items; parses input and returns JSON responses.

"""
Cart Routes

SECURITY: All routes require authentication.
- Guests act on their own cart only.
- Admins may act on any person's cart.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import StorefrontError
from ..services import cart_service
from ..services.auth_service import ROLE_ADMIN, ROLE_GUEST
from ..validation import parse_optional_positive_int, parse_positive_int


carts_bp = Blueprint("carts", __name__, url_prefix="/api/carts")


def _json_error(exc: Exception):
    if isinstance(exc, StorefrontError):
        return jsonify(exc.to_dict()), exc.http_status
    current_app.logger.exception("Unexpected error in cart route")
    return jsonify({"error": "Internal server error"}), 500


def _is_admin() -> bool:
    return ROLE_ADMIN in g.roles


def _owner_scope():
    """person_id a guest is confined to; None for admins."""
    return None if _is_admin() else g.current_person.id


@carts_bp.post("")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def create_cart_route():
    """
    Create a cart.

    Request body:
    {
        "person_id": 7   // optional, defaults to the caller; admins only for others
    }
    """
    data = request.get_json(silent=True) or {}
    try:
        person_id = parse_optional_positive_int(data.get("person_id"), "person_id") or g.current_person.id
        if person_id != g.current_person.id and not _is_admin():
            return jsonify({"error": "Access denied"}), 403

        cart = cart_service.create_cart(person_id)
        return jsonify(cart_service.cart_to_dict(cart)), 201
    except Exception as e:
        return _json_error(e)


@carts_bp.get("/me")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def get_my_cart_route():
    try:
        cart = cart_service.get_cart_for_person(g.current_person.id)
        return jsonify(cart_service.cart_to_dict(cart))
    except Exception as e:
        return _json_error(e)


@carts_bp.get("/person/<int:person_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def get_cart_by_person_route(person_id: int):
    if person_id != g.current_person.id and not _is_admin():
        return jsonify({"error": "Access denied"}), 403
    try:
        cart = cart_service.get_cart_for_person(person_id)
        return jsonify(cart_service.cart_to_dict(cart))
    except Exception as e:
        return _json_error(e)


@carts_bp.post("/items")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def add_to_cart_route():
    """
    Add a product line to the caller's cart.

    Request body:
    {
        "product_id": 3,   // required
        "quantity": 2      // required, >= 1
    }

    Returns:
        Created cart item (status "Created")
    """
    data = request.get_json(silent=True) or {}
    try:
        product_id = parse_positive_int(data.get("product_id"), "product_id")
        quantity = parse_positive_int(data.get("quantity"), "quantity")

        cart_item = cart_service.add_to_cart(g.current_person.id, product_id, quantity)
        return jsonify(cart_service.cart_item_to_dict(cart_item)), 201
    except Exception as e:
        return _json_error(e)


@carts_bp.patch("/items/<int:cart_item_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def update_cart_item_route(cart_item_id: int):
    """Change the quantity of a Created line. Body: {"quantity": 3}"""
    data = request.get_json(silent=True) or {}
    try:
        quantity = parse_positive_int(data.get("quantity"), "quantity")
        cart_item = cart_service.update_cart_item_quantity(cart_item_id, quantity, person_id=_owner_scope())
        return jsonify(cart_service.cart_item_to_dict(cart_item))
    except Exception as e:
        return _json_error(e)


@carts_bp.post("/items/<int:cart_item_id>/remove")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def remove_cart_item_route(cart_item_id: int):
    try:
        cart_item = cart_service.remove_cart_item(cart_item_id, person_id=_owner_scope())
        return jsonify(cart_service.cart_item_to_dict(cart_item))
    except Exception as e:
        return _json_error(e)


@carts_bp.delete("/items/<int:cart_item_id>")
@require_auth
@require_role(ROLE_ADMIN, ROLE_GUEST)
def delete_cart_item_route(cart_item_id: int):
    try:
        cart_service.delete_cart_item(cart_item_id, person_id=_owner_scope())
        return jsonify({"deleted": True, "id": cart_item_id})
    except Exception as e:
        return _json_error(e)
