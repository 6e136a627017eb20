"""
Python client for the todo tracker API, with optimistic list state.
"""
from .api import ClientError, TodoAPIClient
from .controller import DriftPoller, TodoListController
from .transport import ApiResponse, UrllibTransport

__all__ = [
    'ApiResponse',
    'ClientError',
    'DriftPoller',
    'TodoAPIClient',
    'TodoListController',
    'UrllibTransport',
]
