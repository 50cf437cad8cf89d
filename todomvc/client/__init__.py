"""
TodoMVC — Python Client
=========================

    state.py  Filter and State: the local mirror, addressed by filtered index
    api.py    TodoApi: MessagePack calls to the task endpoints over httpx
    app.py    TodoApp: user actions → state mutation → API push
"""

from todomvc.client.api import DataError, FetchError, StatusError, TodoApi
from todomvc.client.app import TodoApp
from todomvc.client.state import Filter, State

__all__ = [
    "DataError",
    "FetchError",
    "Filter",
    "State",
    "StatusError",
    "TodoApi",
    "TodoApp",
]
