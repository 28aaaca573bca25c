# Routes package init
"""
Products API — Routes Package
===============================

Route Inventory:
    - products.py:  GET / and the /products CRUD + count routes
    - health.py:    GET /health (service health check)

Routes stay thin: they parse input, call ProductService, and shape the
response. Storage access lives in services/product_service.py.
"""
