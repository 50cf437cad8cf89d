"""
TodoMVC — Package Initializer
===============================

Layout:

    ┌─────────────────────────────────────┐
    │      client/ (state + API client)   │  ← mirror of the entry list
    ├─────────────────────────────────────┤
    │          routes/ (API layer)        │  ← MessagePack over HTTP
    ├─────────────────────────────────────┤
    │     services/ (persistence ops)     │  ← create/list/get/update/remove
    ├─────────────────────────────────────┤
    │  models/ + schemas/ + codec (data)  │  ← ORM row, Entry, wire format
    ├─────────────────────────────────────┤
    │        database (pool handle)       │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "0.1.0"
