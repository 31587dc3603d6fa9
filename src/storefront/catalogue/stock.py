"""Manual stock adjustments by an administrator."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AdjustStock:
    """Move the stock counter by ``delta`` units (negative to write stock off)."""

    product_id = Identifier(required=True)
    delta = Integer(required=True)


@storefront.command_handler(part_of=Product)
class AdjustStockHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        if command.delta == 0:
            raise ValidationError({"delta": ["Adjustment must be non-zero"]})

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if not product.track_quantity:
            raise ValidationError({"product_id": ["Product does not track stock"]})

        if command.delta > 0:
            return repo.increment_stock(str(product.id), command.delta)
        return repo.decrement_stock(str(product.id), -command.delta)
