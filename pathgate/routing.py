from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from yarl import URL

from pathgate.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RouteSpec:
    """Static description of a route before its backend URL is known.

    `service` names the configuration key holding the backend base URL.
    """

    prefix: str
    service: str
    suffix: str = ""


@dataclass(frozen=True, slots=True)
class Route:
    prefix: str
    backend_url: str
    suffix: str = ""

    def __post_init__(self):
        if not self.prefix.startswith("/"):
            raise ConfigurationError(f"Route prefix must start with '/': {self.prefix!r}")
        if self.suffix and not self.suffix.startswith("/"):
            raise ConfigurationError(f"Route suffix must start with '/': {self.suffix!r}")
        try:
            url = URL(self.backend_url)
        except (TypeError, ValueError):
            url = None
        if url is None or url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(
                f"Backend URL for {self.prefix} must be an absolute http(s) URL, got {self.backend_url!r}"
            )

    @property
    def target(self) -> str:
        return f"{self.backend_url.rstrip('/')}{self.suffix}"

    def matches(self, path: str) -> bool:
        prefix = self.prefix.rstrip("/")
        if not prefix:
            return True
        return path == prefix or path.startswith(f"{prefix}/")

    def target_url(self, path: str, query_string: str = "") -> str:
        """Map an inbound path under this prefix onto the backend.

        /api/v1/auth/login with target http://svc:8080/auth
        becomes http://svc:8080/auth/login
        """
        remainder = path[len(self.prefix.rstrip("/")) :]
        target_url = f"{self.target}{remainder}"
        if query_string:
            target_url += f"?{query_string}"
        return target_url


class RouteTable:
    """Ordered, immutable prefix routes; the first matching prefix wins."""

    def __init__(self, routes: Iterable[Route]):
        self._routes: tuple[Route, ...] = tuple(routes)

        seen: set[str] = set()
        for route in self._routes:
            prefix = route.prefix.rstrip("/") or "/"
            if prefix in seen:
                raise ConfigurationError(f"Duplicate route prefix: {route.prefix}")
            seen.add(prefix)

    @property
    def routes(self) -> Sequence[Route]:
        return self._routes

    def resolve(self, path: str) -> Optional[Route]:
        for route in self._routes:
            if route.matches(path):
                return route
        return None

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self):
        return iter(self._routes)


DEFAULT_ROUTES: tuple[RouteSpec, ...] = (
    RouteSpec("/api/v1/auth", "BASE_MICROSERVICE", "/auth"),
    RouteSpec("/api/v1/banners", "BASE_MICROSERVICE", "/banners"),
    RouteSpec("/api/v1/categories", "BASE_MICROSERVICE", "/categories"),
    RouteSpec("/api/v1/brands", "BRANDS_MICROSERVICE", "/brands"),
    RouteSpec("/api/v1/products", "PRODUCTS_MICROSERVICE", "/products"),
    RouteSpec("/api/v1/blogs", "BLOGS_MICROSERVICE", "/blogs"),
    RouteSpec("/api/v1/instagrams", "INSTAGRAM_MICROSERVICE", "/instagrams"),
    RouteSpec("/api/v1/orders", "ORDERS_MICROSERVICE", "/orders"),
    RouteSpec("/api/v1/services", "SERVICES_MICROSERVICE", "/services"),
    RouteSpec("/api/v1/contacpime", "CONTACPIME_MICROSERVICE", "/contacpime"),
)
