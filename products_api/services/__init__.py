# Services package init
"""
Products API — Services Layer
===============================

Service Inventory:
    - ProductService: list, create, update, delete and price-threshold count
      over the products table, each a single database call.
"""
