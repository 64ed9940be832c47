class PathgateError(Exception): ...


class ConfigurationError(PathgateError):
    """Raised when a required configuration key is missing or invalid."""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)


class MissingConfigError(ConfigurationError):
    def __init__(self, key: str):
        super().__init__(f"Missing required configuration key: {key}", key=key)


class RouteNotFoundError(PathgateError):
    """Raised when no configured prefix matches the request path."""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"No route for {method} {path}")


class ForwardingError(PathgateError):
    """Raised form of a failed forwarding attempt."""

    def __init__(self, kind: str, message: str, path: str = ""):
        self.kind = kind
        self.message = message
        self.path = path
        super().__init__(f"Proxy Error [{kind}]: {message}")


class ClientDisconnect(PathgateError):
    """The downstream client went away before the request completed."""
