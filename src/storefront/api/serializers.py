"""Aggregate -> JSON-ready dict conversions for API responses."""


def account_to_dict(account) -> dict:
    return {
        "id": str(account.id),
        "name": account.name,
        "email": account.email,
        "role": account.role,
        "phone": account.phone,
        "is_active": account.is_active,
        "created_at": account.created_at,
    }


def category_to_dict(category) -> dict:
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "image": category.image,
        "is_active": category.is_active,
        "sort_order": category.sort_order,
    }


def product_to_dict(product) -> dict:
    return {
        "id": str(product.id),
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "short_description": product.short_description,
        "category_id": str(product.category_id),
        "price": product.price,
        "compare_price": product.compare_price,
        "discount_percentage": product.discount_percentage,
        "sku": product.sku,
        "weight": {"value": product.weight_value, "unit": product.weight_unit},
        "images": [{"url": i.url, "alt": i.alt, "is_primary": i.is_primary} for i in product.images],
        "primary_image": product.primary_image,
        "inventory": {
            "quantity": product.stock_quantity,
            "low_stock_threshold": product.low_stock_threshold,
            "track_quantity": product.track_quantity,
        },
        "in_stock": product.in_stock,
        "is_low_stock": product.is_low_stock,
        "is_active": product.is_active,
        "is_featured": product.is_featured,
        "average_rating": product.average_rating,
        "review_count": product.review_count,
        "created_at": product.created_at,
    }


def cart_to_dict(cart, products: dict | None = None) -> dict:
    """``products`` maps product id -> Product, used to decorate lines with names and images."""
    products = products or {}
    items = []
    for line in cart.items:
        product = products.get(str(line.product_id))
        items.append(
            {
                "product_id": str(line.product_id),
                "name": product.name if product else None,
                "image": product.primary_image if product else None,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "line_total": line.line_total,
            }
        )
    return {
        "id": str(cart.id),
        "account_id": str(cart.account_id),
        "items": items,
        "total_items": cart.total_items,
        "total_amount": cart.total_amount,
        "last_modified": cart.last_modified,
    }


def order_to_dict(order) -> dict:
    address = order.shipping_address
    payment = order.payment
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "account_id": str(order.account_id),
        "items": [
            {
                "product_id": str(line.product_id),
                "name": line.name,
                "image": line.image,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "line_total": line.line_total,
            }
            for line in order.items
        ],
        "shipping_address": {
            "name": address.name,
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "zip_code": address.zip_code,
            "country": address.country,
            "phone": address.phone,
        }
        if address
        else None,
        "payment": {
            "method": payment.method,
            "transaction_id": payment.transaction_id,
            "paid_at": payment.paid_at,
        }
        if payment
        else None,
        "items_price": order.items_price,
        "tax_price": order.tax_price,
        "shipping_price": order.shipping_price,
        "total_price": order.total_price,
        "status": order.status,
        "is_paid": order.is_paid,
        "is_delivered": order.is_delivered,
        "delivered_at": order.delivered_at,
        "notes": order.notes,
        "tracking_number": order.tracking_number,
        "estimated_delivery": order.estimated_delivery,
        "status_history": [
            {"status": change.status, "changed_at": change.changed_at, "note": change.note}
            for change in order.history()
        ],
        "created_at": order.created_at,
    }


def tracking_to_dict(order) -> dict:
    """The public subset of an order shown on the tracking page."""
    return {
        "order_number": order.order_number,
        "status": order.status,
        "tracking_number": order.tracking_number,
        "estimated_delivery": order.estimated_delivery,
        "is_delivered": order.is_delivered,
        "delivered_at": order.delivered_at,
        "status_history": [{"status": c.status, "changed_at": c.changed_at} for c in order.history()],
    }


def review_to_dict(review) -> dict:
    return {
        "id": str(review.id),
        "product_id": str(review.product_id),
        "account_id": str(review.account_id),
        "title": review.title,
        "text": review.text,
        "rating": review.rating,
        "is_verified_purchase": review.is_verified_purchase,
        "helpful_votes": review.helpful_votes,
        "created_at": review.created_at,
    }
