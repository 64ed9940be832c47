import pytest

from pathgate import ConfigurationError, Route, RouteTable
from pathgate.routing import DEFAULT_ROUTES


@pytest.fixture
def table():
    return RouteTable(
        [
            Route("/api/v1/auth", "http://svc:8080", "/auth"),
            Route("/api/v1/banners", "http://svc:8080", "/banners"),
            Route("/api/v1/products", "http://products:9000/", "/products"),
        ]
    )


class TestRoute:
    def test_target_joins_base_and_suffix(self):
        route = Route("/api/v1/products", "http://products:9000/", "/products")
        assert route.target == "http://products:9000/products"

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/api/v1/auth", "http://svc:8080/auth"),
            ("/api/v1/auth/", "http://svc:8080/auth/"),
            ("/api/v1/auth/login", "http://svc:8080/auth/login"),
            ("/api/v1/auth/users/42/roles", "http://svc:8080/auth/users/42/roles"),
        ],
    )
    def test_target_url_keeps_path_remainder(self, path, expected):
        route = Route("/api/v1/auth", "http://svc:8080", "/auth")
        assert route.target_url(path) == expected

    def test_target_url_keeps_query_string(self):
        route = Route("/api/v1/products", "http://products:9000", "/products")
        assert (
            route.target_url("/api/v1/products", "page=2&sort=name")
            == "http://products:9000/products?page=2&sort=name"
        )

    def test_matches_on_segment_boundary(self):
        route = Route("/api/v1/auth", "http://svc:8080", "/auth")
        assert route.matches("/api/v1/auth")
        assert route.matches("/api/v1/auth/login")
        assert not route.matches("/api/v1/authors")
        assert not route.matches("/api/v1")

    def test_root_prefix_matches_everything(self):
        route = Route("/", "http://fallback:8080")
        assert route.matches("/anything/at/all")
        assert route.target_url("/anything") == "http://fallback:8080/anything"

    @pytest.mark.parametrize("backend_url", ["svc:8080", "ftp://svc", "", "http://"])
    def test_rejects_invalid_backend_url(self, backend_url):
        with pytest.raises(ConfigurationError):
            Route("/api", backend_url)

    def test_rejects_relative_prefix(self):
        with pytest.raises(ConfigurationError, match="must start with '/'"):
            Route("api/v1", "http://svc:8080")

    def test_route_is_immutable(self):
        route = Route("/api", "http://svc:8080")
        with pytest.raises(AttributeError):
            route.prefix = "/other"  # type: ignore[misc]


class TestRouteTable:
    def test_resolve_selects_backend(self, table: RouteTable):
        route = table.resolve("/api/v1/products/17")
        assert route is not None
        assert route.backend_url == "http://products:9000/"
        assert route.suffix == "/products"

    def test_resolve_no_match(self, table: RouteTable):
        assert table.resolve("/api/v2/auth") is None
        assert table.resolve("/") is None
        assert table.resolve("/api/v1/productsx") is None

    def test_resolve_is_deterministic(self, table: RouteTable):
        first = [table.resolve(p) for p in ("/api/v1/auth/x", "/api/v1/banners", "/nope")]
        second = [table.resolve(p) for p in ("/api/v1/auth/x", "/api/v1/banners", "/nope")]
        assert first == second

    def test_first_registered_prefix_wins(self):
        table = RouteTable(
            [
                Route("/api", "http://general:8080"),
                Route("/api/v1/auth", "http://auth:8080"),
            ]
        )
        assert table.resolve("/api/v1/auth/login").backend_url == "http://general:8080"

    def test_duplicate_prefix_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate route prefix"):
            RouteTable(
                [
                    Route("/api/v1/auth", "http://a:8080"),
                    Route("/api/v1/auth/", "http://b:8080"),
                ]
            )

    def test_len_and_iteration_keep_order(self, table: RouteTable):
        assert len(table) == 3
        assert [r.prefix for r in table] == [
            "/api/v1/auth",
            "/api/v1/banners",
            "/api/v1/products",
        ]


def test_default_routes_cover_all_services():
    prefixes = [spec.prefix for spec in DEFAULT_ROUTES]
    assert prefixes == [
        "/api/v1/auth",
        "/api/v1/banners",
        "/api/v1/categories",
        "/api/v1/brands",
        "/api/v1/products",
        "/api/v1/blogs",
        "/api/v1/instagrams",
        "/api/v1/orders",
        "/api/v1/services",
        "/api/v1/contacpime",
    ]
    assert {spec.service for spec in DEFAULT_ROUTES} == {
        "BASE_MICROSERVICE",
        "BRANDS_MICROSERVICE",
        "PRODUCTS_MICROSERVICE",
        "BLOGS_MICROSERVICE",
        "INSTAGRAM_MICROSERVICE",
        "ORDERS_MICROSERVICE",
        "SERVICES_MICROSERVICE",
        "CONTACPIME_MICROSERVICE",
    }
