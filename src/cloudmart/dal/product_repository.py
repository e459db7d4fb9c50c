"""
DynamoDB repository for products.

The catalog is small enough to be filtered with scans; sorting and paging
happen in the logic layer.
"""

from decimal import Decimal
from typing import List, Optional

from boto3.dynamodb.conditions import Attr

from cloudmart.dal.dynamodb_handler import DynamoDBHandler
from cloudmart.handlers.utils.observability import tracer
from cloudmart.models.product import Product, ProductStatus


class ProductRepository:
    def __init__(self, table: DynamoDBHandler) -> None:
        self.table = table

    @property
    def table_name(self) -> str:
        return self.table.table_name

    @tracer.capture_method
    def get_by_id(self, product_id: str) -> Optional[Product]:
        item = self.table.get_item({'id': product_id})
        return Product.from_item(item) if item else None

    @tracer.capture_method
    def save(self, product: Product) -> Product:
        self.table.put_item(product.to_item())
        return product

    @tracer.capture_method
    def find_by_status(self, status: ProductStatus) -> List[Product]:
        items = self.table.scan_all(Attr('status').eq(status.value))
        return [Product.from_item(item) for item in items]

    @tracer.capture_method
    def find_active_by_category(self, category: str) -> List[Product]:
        condition = Attr('status').eq(ProductStatus.ACTIVE.value) & Attr('category').eq(category)
        return [Product.from_item(item) for item in self.table.scan_all(condition)]

    @tracer.capture_method
    def find_active_by_price_range(self, min_price: Decimal, max_price: Decimal) -> List[Product]:
        condition = Attr('status').eq(ProductStatus.ACTIVE.value) & Attr('price').between(min_price, max_price)
        return [Product.from_item(item) for item in self.table.scan_all(condition)]

    @tracer.capture_method
    def find_by_seller(self, seller_id: str) -> List[Product]:
        items = self.table.scan_all(Attr('seller_id').eq(seller_id))
        return [Product.from_item(item) for item in items]
