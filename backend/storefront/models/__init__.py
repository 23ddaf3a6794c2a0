from .reference import Enumeration, EnumValue
from .catalog import Category, Product
from .people import Person
from .carts import Cart, CartItem
from .orders import Order, OrderItem

__all__ = [
    'Enumeration', 'EnumValue',
    'Category', 'Product',
    'Person',
    'Cart', 'CartItem',
    'Order', 'OrderItem',
]
