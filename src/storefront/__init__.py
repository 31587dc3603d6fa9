"""Single-vendor storefront built on Protean."""
