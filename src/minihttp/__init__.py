__version__ = "1.0.0"

from .config import ServerConfig
from .errors import ServerError, SocketSetupError
from .server import HTTPServer, create_app

__all__ = ["HTTPServer", "ServerConfig", "ServerError", "SocketSetupError", "create_app", "__version__"]
