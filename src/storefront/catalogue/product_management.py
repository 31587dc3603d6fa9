"""Product administration: commands and handler."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import Conflict, NotFound


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=100)
    description: String(required=True, max_length=2000)
    short_description: String(max_length=200)
    category_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)
    compare_price: Float(min_value=0.0)
    sku: String(required=True, max_length=50)
    weight_value: Float(default=0.0, min_value=0.0)
    weight_unit: String(max_length=2, default="lb")
    stock_quantity: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=10, min_value=0)
    track_quantity: Boolean(default=True)
    is_featured: Boolean(default=False)
    images: Text()  # JSON: list of {url, alt, is_primary}
    created_by: Identifier()


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    changes: Text(required=True)  # JSON: field -> new value


@storefront.command(part_of="Product")
class ReplaceProductImages:
    product_id: Identifier(required=True)
    images: Text(required=True)  # JSON: list of {url, alt, is_primary}


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        try:
            current_domain.repository_for(Category).get(command.category_id)
        except ObjectNotFoundError as exc:
            raise NotFound(f"Category {command.category_id} not found") from exc

        product = Product.create(
            name=command.name,
            description=command.description,
            short_description=command.short_description,
            category_id=command.category_id,
            price=command.price,
            compare_price=command.compare_price,
            sku=command.sku,
            weight_value=command.weight_value,
            weight_unit=command.weight_unit,
            stock_quantity=command.stock_quantity,
            low_stock_threshold=command.low_stock_threshold,
            track_quantity=command.track_quantity,
            is_featured=command.is_featured,
            images=json.loads(command.images) if command.images else None,
            created_by=command.created_by,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(**json.loads(command.changes))
        repo.add(product)

    @handle(ReplaceProductImages)
    def replace_images(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.replace_images(json.loads(command.images))
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        from storefront.order.order import Order

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if current_domain.repository_for(Order).has_open_order_for_product(str(product.id)):
            raise Conflict("Product is referenced by an order that is still in progress")
        repo._dao.delete(product)
