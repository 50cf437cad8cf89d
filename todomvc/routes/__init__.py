# Routes package init
"""
TodoMVC — API Routes Package
==============================

Route Inventory:
    - tasks.py:   POST /task, GET /tasks, POST /tasks,
                  GET/PUT/DELETE /task?id=
    - health.py:  GET /health

Routes stay thin: decode the request, call the task service, encode the
response. Status codes for failures come from the exception handlers in
main.py.
"""
