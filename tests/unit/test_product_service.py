"""
Unit tests for the product catalog service.
"""

import base64
from decimal import Decimal

import pytest

from cloudmart.handlers.utils.dependencies import get_product_repository, get_product_service
from cloudmart.handlers.utils.errors import AccessDeniedError, BadRequestError, FileUploadError, ResourceNotFoundError
from cloudmart.logic.product_service import sort_products
from cloudmart.models.input import CreateProductRequest, ImageUpload, UpdateProductRequest
from cloudmart.models.product import ProductStatus
from cloudmart.models.user import UserRole

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def _image(filename: str = "shoe.png", data: bytes = PNG_BYTES) -> ImageUpload:
    return ImageUpload(filename=filename, content_type="image/png", data=base64.b64encode(data).decode())


def _create_request(**overrides) -> CreateProductRequest:
    fields = {"name": "Trail Shoe", "price": Decimal("89.90"), "stock": 5, "category": "Footwear", "brand": "Acme"}
    fields.update(overrides)
    return CreateProductRequest(**fields)


class TestCreateProduct:
    def test_seller_creates_active_product(self, aws, seller):
        product = get_product_service().create_product(_create_request(), seller)

        assert product.status == ProductStatus.ACTIVE
        assert product.seller_id == seller.id
        assert product.seller_name == "Sam Seller"
        assert get_product_repository().get_by_id(product.id).price == Decimal("89.90")

    def test_customer_cannot_create_product(self, aws, customer):
        with pytest.raises(AccessDeniedError, match="Only sellers can create products"):
            get_product_service().create_product(_create_request(), customer)

    def test_image_is_uploaded_to_bucket(self, aws, seller):
        product = get_product_service().create_product(_create_request(image=_image()), seller)

        assert product.image_url.startswith(f"https://{aws.bucket}.s3.amazonaws.com/products/")
        assert product.image_url.endswith(".png")
        key = product.image_url.split(".amazonaws.com/", 1)[1]
        assert aws.s3.get_object(Bucket=aws.bucket, Key=key)["Body"].read() == PNG_BYTES

    def test_invalid_base64_rejected(self, aws, seller):
        image = ImageUpload(filename="shoe.png", data="***not base64***")

        with pytest.raises(FileUploadError, match="Invalid file content"):
            get_product_service().create_product(_create_request(image=image), seller)

    def test_disallowed_extension_rejected(self, aws, seller):
        with pytest.raises(FileUploadError, match="File type not allowed"):
            get_product_service().create_product(_create_request(image=_image("script.exe")), seller)


class TestBrowseProducts:
    def test_list_only_active_products(self, aws, seller, make_product):
        active = make_product(name="Active")
        hidden = make_product(name="Hidden")
        get_product_service().delete_product(hidden.id, seller)

        assert [product.id for product in get_product_service().list_products()] == [active.id]

    def test_list_sorted_by_price_ascending(self, aws, make_product):
        make_product(name="B", price="20.00")
        make_product(name="A", price="5.00")
        make_product(name="C", price="12.50")

        products = get_product_service().list_products(sort_by="price", direction="asc")

        assert [product.name for product in products] == ["A", "C", "B"]

    def test_invalid_sort_field(self, aws):
        with pytest.raises(BadRequestError, match="Invalid sort field"):
            get_product_service().list_products(sort_by="seller_id")

    def test_search_is_case_insensitive(self, aws, make_product):
        make_product(name="Red Running Shoe")
        make_product(name="Desk Lamp", category="Home", description="Warm light for reading")
        make_product(name="Sofa", category="Home")

        assert [p.name for p in get_product_service().search_products("RUNNING")] == ["Red Running Shoe"]
        assert [p.name for p in get_product_service().search_products("reading")] == ["Desk Lamp"]
        assert len(get_product_service().search_products("home")) == 2

    def test_empty_search_returns_all_active(self, aws, make_product):
        make_product()
        make_product()

        assert len(get_product_service().search_products("  ")) == 2

    def test_category_filter(self, aws, make_product):
        make_product(name="Shoe")
        make_product(name="Lamp", category="Home")

        assert [p.name for p in get_product_service().get_products_by_category("Home")] == ["Lamp"]

    def test_price_range_inclusive_and_sorted(self, aws, make_product):
        make_product(name="Cheap", price="5.00")
        make_product(name="Mid", price="10.00")
        make_product(name="Pricey", price="50.00")

        products = get_product_service().get_products_by_price_range(Decimal("5"), Decimal("10"))

        assert [p.name for p in products] == ["Cheap", "Mid"]

    def test_price_range_min_above_max(self, aws):
        with pytest.raises(BadRequestError):
            get_product_service().get_products_by_price_range(Decimal("10"), Decimal("5"))

    def test_categories_are_distinct_and_sorted(self, aws, make_product):
        make_product(category="Toys")
        make_product(category="Books")
        make_product(category="Toys")

        assert get_product_service().get_categories() == ["Books", "Toys"]

    def test_seller_products_only_own(self, aws, seller, make_product, make_user):
        own = make_product(name="Mine", stock=0)
        make_product(name="Theirs", owner=make_user())

        assert [p.id for p in get_product_service().get_seller_products(seller)] == [own.id]

    def test_get_unknown_product(self, aws):
        with pytest.raises(ResourceNotFoundError, match="Product not found with id: nope"):
            get_product_service().get_product("nope")


class TestUpdateProduct:
    def test_owner_updates_fields(self, aws, seller, make_product):
        product = make_product()
        request = UpdateProductRequest(name="Renamed", price=Decimal("10.50"))

        updated = get_product_service().update_product(product.id, request, seller)

        assert updated.name == "Renamed"
        assert updated.price == Decimal("10.50")
        assert updated.category == product.category

    def test_other_seller_cannot_update(self, aws, make_product, make_user):
        product = make_product()
        intruder = make_user(UserRole.SELLER)

        with pytest.raises(AccessDeniedError):
            get_product_service().update_product(product.id, UpdateProductRequest(name="X"), intruder)

    def test_admin_can_update_any_product(self, aws, admin, make_product):
        product = make_product()
        assert get_product_service().update_product(product.id, UpdateProductRequest(stock=1), admin).stock == 1

    def test_stock_zero_marks_out_of_stock_and_restock_reactivates(self, aws, seller, make_product):
        product = make_product(stock=3)
        service = get_product_service()

        assert service.update_product(product.id, UpdateProductRequest(stock=0), seller).status == ProductStatus.OUT_OF_STOCK
        assert service.update_product(product.id, UpdateProductRequest(stock=7), seller).status == ProductStatus.ACTIVE

    def test_new_image_replaces_old(self, aws, seller):
        service = get_product_service()
        product = service.create_product(_create_request(image=_image()), seller)
        old_key = product.image_url.split(".amazonaws.com/", 1)[1]

        updated = service.update_product(product.id, UpdateProductRequest(image=_image("new.jpg")), seller)

        assert updated.image_url != product.image_url
        assert updated.image_url.endswith(".jpg")
        listed = aws.s3.list_objects_v2(Bucket=aws.bucket).get("Contents", [])
        assert old_key not in [obj["Key"] for obj in listed]


class TestDeleteProduct:
    def test_delete_is_soft(self, aws, seller, make_product):
        product = make_product()
        get_product_service().delete_product(product.id, seller)

        assert get_product_repository().get_by_id(product.id).status == ProductStatus.DELETED

    def test_customer_cannot_delete(self, aws, customer, make_product):
        product = make_product()
        with pytest.raises(AccessDeniedError):
            get_product_service().delete_product(product.id, customer)


def test_sort_products_rejects_bad_direction():
    with pytest.raises(BadRequestError, match="Invalid sort direction"):
        sort_products([], direction="sideways")
