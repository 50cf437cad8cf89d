# Services package init
"""
TodoMVC — Services Layer
==========================

Service Inventory:
    - TaskService: CRUD and bulk upsert against the `task` table

Services take an AsyncSession per call and know nothing about HTTP.
"""
