"""Example façades built on ownedstore.

This package demonstrates library usage but is not part of the core API.
"""

from .file_logger import FileLogger
from .task_manager import Task, TaskManager
from .user_cache import OrderService, User, UserService

__all__ = [
    "FileLogger",
    "Task",
    "TaskManager",
    "User",
    "UserService",
    "OrderService",
]
