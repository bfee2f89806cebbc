"""
Taskboard — In-Memory To-Do Service over HTTP
===============================================
Clients create, list, toggle and delete short text tasks through a
small JSON API.

Architecture:
    Store    — TaskStore guarded by a readers-writer lock
    Server   — FastAPI router mapping verb + path to store operations
    Witness  — Logging that observes actions, never changes them
"""

__version__ = "0.1.0"

from taskboard.store import Task, TaskStore, ReadWriteLock
from taskboard.config import ServerConfig
from taskboard.errors import TaskboardError, InvalidRequestError, TaskNotFoundError
from taskboard.witness import TaskWitness, setup_logging
from taskboard.server import create_app

__all__ = [
    "Task", "TaskStore", "ReadWriteLock",
    "ServerConfig",
    "TaskboardError", "InvalidRequestError", "TaskNotFoundError",
    "TaskWitness", "setup_logging",
    "create_app",
]
