"""
Transport layer: the listening socket, per-client connections and the
threads that run them.
"""

from .connection import Connection, ConnectionState
from .executor import DetachedExecutor
from .socket_server import SocketServer

__all__ = ["Connection", "ConnectionState", "DetachedExecutor", "SocketServer"]
