from .asgi.gateway import ASGIGateway as ASGIGateway
from .asgi.gateway import create_gateway as create_gateway
from .config import GatewayConfig as GatewayConfig
from .errors import ConfigurationError as ConfigurationError
from .errors import PathgateError as PathgateError
from .errors import RouteNotFoundError as RouteNotFoundError
from .routing import Route as Route
from .routing import RouteTable as RouteTable
from .throttler import QuotaExceedsError as QuotaExceedsError
from .throttler import Throttler as Throttler

VERSION = "0.1.0"
__version__ = VERSION
