from orders_api.models.customer import Customer
from orders_api.models.product import Product
from orders_api.models.order_item import OrderItem
from orders_api.models.order import Order, OrderStatus
