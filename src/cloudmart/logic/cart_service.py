"""
Business Logic Layer for shopping carts.

Carts hold a snapshot of product name, price and stock. The snapshot is
refreshed whenever a line is touched and can be reconciled with the catalog
through ``sync_cart_with_inventory``.
"""

from aws_lambda_powertools.metrics import MetricUnit

from cloudmart.dal.cart_repository import CartRepository
from cloudmart.dal.product_repository import ProductRepository
from cloudmart.handlers.utils.errors import BadRequestError, ResourceNotFoundError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.models.cart import Cart, CartItem
from cloudmart.models.input import AddToCartRequest
from cloudmart.models.product import Product


class CartService:
    def __init__(self, carts: CartRepository, products: ProductRepository):
        self.carts = carts
        self.products = products

    def _require_cart(self, user_id: str) -> Cart:
        cart = self.carts.get(user_id)
        if cart is None:
            raise ResourceNotFoundError('Cart', user_id, message='Cart is empty')
        return cart

    def _require_product(self, product_id: str) -> Product:
        product = self.products.get_by_id(product_id)
        if product is None:
            raise ResourceNotFoundError('Product', product_id)
        return product

    @tracer.capture_method
    def get_cart(self, user_id: str) -> Cart:
        """Return the user's cart, or an empty one if nothing was added yet."""
        return self.carts.get(user_id) or Cart.empty(user_id)

    @tracer.capture_method
    def add_to_cart(self, user_id: str, request: AddToCartRequest) -> Cart:
        """
        Add a product, merging with an existing line for the same product.

        Raises:
            ResourceNotFoundError: If the product does not exist
            BadRequestError: If the product is not ACTIVE or stock is insufficient
        """
        product = self._require_product(request.product_id)
        if not product.is_available:
            raise BadRequestError('Product is not available')

        cart = self.get_cart(user_id)
        item = cart.find_item(product.id)
        quantity = request.quantity + (item.quantity if item else 0)
        if quantity > product.stock:
            raise BadRequestError('Insufficient stock')

        if item is None:
            item = CartItem(
                product_id=product.id,
                product_name=product.name,
                price=product.price,
                quantity=quantity,
                image_url=product.image_url,
            )
            cart.items.append(item)
        else:
            item.quantity = quantity
            item.product_name = product.name
        item.refresh(product.price, product.stock)

        self.carts.save(cart)
        metrics.add_metric(name="CartItemAdded", unit=MetricUnit.Count, value=1)
        logger.info("Product added to cart", extra={"user_id": user_id, "product_id": product.id, "quantity": quantity})
        return cart

    @tracer.capture_method
    def update_cart_item_quantity(self, user_id: str, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            raise BadRequestError('Quantity must be greater than 0')

        cart = self._require_cart(user_id)
        product = self._require_product(product_id)
        if quantity > product.stock:
            raise BadRequestError('Insufficient stock')

        item = cart.find_item(product_id)
        if item is None:
            raise ResourceNotFoundError('Product', product_id, message='Product not found in cart')

        item.quantity = quantity
        item.refresh(product.price, product.stock)
        self.carts.save(cart)

        logger.info("Cart item quantity updated", extra={"user_id": user_id, "product_id": product_id, "quantity": quantity})
        return cart

    @tracer.capture_method
    def remove_from_cart(self, user_id: str, product_id: str) -> Cart:
        cart = self._require_cart(user_id)
        cart.items = [item for item in cart.items if item.product_id != product_id]
        self.carts.save(cart)

        logger.info("Product removed from cart", extra={"user_id": user_id, "product_id": product_id})
        return cart

    @tracer.capture_method
    def clear_cart(self, user_id: str) -> None:
        self.carts.delete(user_id)
        logger.info("Cart cleared", extra={"user_id": user_id})

    @tracer.capture_method
    def sync_cart_with_inventory(self, user_id: str) -> Cart:
        """
        Reconcile the cart with the catalog.

        Lines for missing or unavailable products are dropped, quantities are
        capped at the available stock and prices are refreshed. The cart is
        only written back when something changed.
        """
        cart = self.carts.get(user_id)
        if cart is None:
            return Cart.empty(user_id)

        updated = False
        kept = []
        for item in cart.items:
            product = self.products.get_by_id(item.product_id)
            if product is None or not product.is_available:
                logger.info("Removing unavailable product from cart", extra={"user_id": user_id, "product_id": item.product_id})
                updated = True
                continue

            before = (item.quantity, item.price, item.available_stock)
            item.quantity = min(item.quantity, product.stock)
            if item.quantity == 0:
                updated = True
                continue
            item.refresh(product.price, product.stock)
            if (item.quantity, item.price, item.available_stock) != before:
                updated = True
            kept.append(item)

        if updated:
            cart.items = kept
            self.carts.save(cart)
            metrics.add_metric(name="CartSynced", unit=MetricUnit.Count, value=1)
        return cart
