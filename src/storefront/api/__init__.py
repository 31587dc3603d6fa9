"""REST API for the storefront.

Routers are collected in ``storefront.api.routes``. This package module stays
import-free because domain traversal loads the route modules individually.
"""
