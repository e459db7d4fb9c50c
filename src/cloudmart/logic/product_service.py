"""
Business Logic Layer for the product catalog.

Sellers manage their own products, admins manage every product, and anyone
can browse ACTIVE products. Deleting a product only flips its status.
"""

import base64
import binascii
from decimal import Decimal
from typing import List, Optional

from aws_lambda_powertools.metrics import MetricUnit

from cloudmart.dal.product_repository import ProductRepository
from cloudmart.handlers.utils.errors import BadRequestError, FileUploadError, ResourceNotFoundError
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.logic.storage_service import StorageService
from cloudmart.models.base import to_money, utc_now
from cloudmart.models.input import CreateProductRequest, ImageUpload, UpdateProductRequest
from cloudmart.models.product import Product, ProductStatus
from cloudmart.models.user import User, UserRole
from cloudmart.security.auth import require_owner_or_admin, require_role

PRODUCT_SORT_FIELDS = ('created_at', 'updated_at', 'price', 'name', 'stock', 'category')
SORT_DIRECTIONS = ('ASC', 'DESC')


def sort_products(products: List[Product], sort_by: str = 'created_at', direction: str = 'DESC') -> List[Product]:
    """
    Sort products by one of the public sort fields.

    Raises:
        BadRequestError: If the field or direction is not supported
    """
    if sort_by not in PRODUCT_SORT_FIELDS:
        raise BadRequestError(f'Invalid sort field: {sort_by}')
    direction = direction.upper()
    if direction not in SORT_DIRECTIONS:
        raise BadRequestError(f'Invalid sort direction: {direction}')
    return sorted(products, key=lambda product: getattr(product, sort_by), reverse=direction == 'DESC')


class ProductService:
    def __init__(self, products: ProductRepository, storage: StorageService):
        self.products = products
        self.storage = storage

    @tracer.capture_method
    def _store_image(self, image: ImageUpload) -> str:
        try:
            content = base64.b64decode(image.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise FileUploadError('Invalid file content') from e
        return self.storage.upload_file(image.filename, content, image.content_type)

    def _require_product(self, product_id: str) -> Product:
        product = self.products.get_by_id(product_id)
        if product is None:
            raise ResourceNotFoundError('Product', product_id)
        return product

    @tracer.capture_method
    def create_product(self, request: CreateProductRequest, current_user: User) -> Product:
        """
        Create an ACTIVE product owned by the current seller.

        Raises:
            AccessDeniedError: If the user is neither a seller nor an admin
            FileUploadError: If the attached image is rejected
        """
        require_role(current_user, UserRole.SELLER, UserRole.ADMIN, message='Only sellers can create products')

        image_url = self._store_image(request.image) if request.image else None
        product = Product.create(
            name=request.name,
            description=request.description,
            price=request.price,
            stock=request.stock,
            category=request.category,
            brand=request.brand,
            image_url=image_url,
            seller_id=current_user.id,
            seller_name=current_user.full_name,
        )
        self.products.save(product)

        metrics.add_metric(name="ProductCreated", unit=MetricUnit.Count, value=1)
        logger.info("Product created", extra={"product_id": product.id, "seller_id": current_user.id})
        return product

    @tracer.capture_method
    def get_product(self, product_id: str) -> Product:
        return self._require_product(product_id)

    @tracer.capture_method
    def list_products(self, sort_by: str = 'created_at', direction: str = 'DESC') -> List[Product]:
        return sort_products(self.products.find_by_status(ProductStatus.ACTIVE), sort_by, direction)

    @tracer.capture_method
    def get_products_by_category(self, category: str) -> List[Product]:
        return sort_products(self.products.find_active_by_category(category))

    @tracer.capture_method
    def search_products(self, keyword: Optional[str]) -> List[Product]:
        """Case-insensitive substring search over name, description and category."""
        needle = (keyword or '').strip().lower()
        products = self.products.find_by_status(ProductStatus.ACTIVE)
        if needle:
            products = [
                product for product in products
                if any(needle in (text or '').lower() for text in (product.name, product.description, product.category))
            ]
        return sort_products(products)

    @tracer.capture_method
    def get_products_by_price_range(self, min_price: Decimal, max_price: Decimal) -> List[Product]:
        if min_price > max_price:
            raise BadRequestError('Minimum price cannot be greater than maximum price')
        return sort_products(self.products.find_active_by_price_range(min_price, max_price), 'price', 'ASC')

    @tracer.capture_method
    def get_seller_products(self, current_user: User) -> List[Product]:
        return sort_products(self.products.find_by_seller(current_user.id))

    @tracer.capture_method
    def get_categories(self) -> List[str]:
        return sorted({product.category for product in self.products.find_by_status(ProductStatus.ACTIVE)})

    @tracer.capture_method
    def update_product(self, product_id: str, request: UpdateProductRequest, current_user: User) -> Product:
        """
        Apply a partial update.

        Restocking a sold-out product reactivates it and selling out an active
        product marks it OUT_OF_STOCK. A new image replaces the previous one.
        """
        product = self._require_product(product_id)
        require_owner_or_admin(current_user, product.seller_id, message='You can only update your own products')

        changes = request.model_dump(exclude_unset=True, exclude_none=True, exclude={'image'})
        for field, value in changes.items():
            setattr(product, field, to_money(value) if field == 'price' else value)

        if 'stock' in changes:
            if product.stock > 0 and product.status == ProductStatus.OUT_OF_STOCK:
                product.status = ProductStatus.ACTIVE
            elif product.stock == 0 and product.status == ProductStatus.ACTIVE:
                product.status = ProductStatus.OUT_OF_STOCK

        if request.image:
            old_image_url = product.image_url
            product.image_url = self._store_image(request.image)
            self.storage.delete_file(old_image_url)

        product.updated_at = utc_now()
        self.products.save(product)

        logger.info("Product updated", extra={"product_id": product_id, "fields": sorted(changes)})
        return product

    @tracer.capture_method
    def delete_product(self, product_id: str, current_user: User) -> None:
        product = self._require_product(product_id)
        require_owner_or_admin(current_user, product.seller_id, message='You can only delete your own products')

        product.status = ProductStatus.DELETED
        product.updated_at = utc_now()
        self.products.save(product)

        metrics.add_metric(name="ProductDeleted", unit=MetricUnit.Count, value=1)
        logger.info("Product deleted", extra={"product_id": product_id})
