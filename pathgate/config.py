import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

import yaml

from pathgate.errors import ConfigurationError, MissingConfigError
from pathgate.routing import DEFAULT_ROUTES, Route, RouteSpec

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_RATE_LIMIT_WINDOW = 120
DEFAULT_RATE_LIMIT_MAX = 100
DEFAULT_RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later"


class ConfigProvider(Protocol):
    def get(self, key: str) -> Optional[str]: ...


class MappingConfigProvider:
    def __init__(self, mapping: Mapping[str, str] | None = None):
        self._mapping = dict(mapping or {})

    def get(self, key: str) -> Optional[str]:
        return self._mapping.get(key)


def read_env_file(file: Union[str, Path]) -> Dict[str, str]:
    envs = {
        key.strip(): value.strip().strip("'\"")
        for line in Path(file).read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.lstrip().startswith("#") and "=" in line
        for key, value in [line.split("=", 1)]
    }
    return envs


class EnvConfigProvider:
    """Process environment, optionally layered over a .env file."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        env_file: Union[str, Path, None] = None,
    ):
        self._values: Dict[str, str] = {}
        if env_file is not None:
            env_path = Path(env_file)
            if not env_path.exists():
                raise ConfigurationError(f"Env file not found: {env_path}")
            self._values.update(read_env_file(env_path))
        self._values.update(os.environ if environ is None else environ)

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)


def require(provider: ConfigProvider, key: str) -> str:
    value = provider.get(key)
    if value is None or not value.strip():
        raise MissingConfigError(key)
    return value.strip()


def _as_number(key: str, raw: Any, cast: type, minimum: float) -> Any:
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a {cast.__name__}, got {raw!r}", key=key) from None
    if value < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got {value}", key=key)
    return value


def _expect_mapping(key: str, value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigurationError(
            f"{key} must be a mapping, got {type(value).__name__}", key=key
        )
    return value


def optional_int(provider: ConfigProvider, key: str, default: int, minimum: int = 0) -> int:
    raw = provider.get(key)
    if raw is None or not raw.strip():
        return default
    return _as_number(key, raw.strip(), int, minimum)


def optional_float(provider: ConfigProvider, key: str, minimum: float = 0) -> Optional[float]:
    raw = provider.get(key)
    if raw is None or not raw.strip():
        return None
    return _as_number(key, raw.strip(), float, minimum)


@dataclass
class RateLimitConfig:
    """Fixed window rate limiting configuration."""

    quota: int = DEFAULT_RATE_LIMIT_MAX
    duration: float = DEFAULT_RATE_LIMIT_WINDOW
    error_status: int = 429
    error_message: str = DEFAULT_RATE_LIMIT_MESSAGE


@dataclass
class ForwardConfig:
    """Outbound request settings; timeout None keeps aiohttp's default."""

    timeout: Optional[float] = None


@dataclass
class GatewayConfig:
    """Main configuration for the ASGI gateway."""

    routes: List[Route]
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    rate_limit: Optional[RateLimitConfig] = field(default_factory=RateLimitConfig)
    forward: ForwardConfig = field(default_factory=ForwardConfig)
    trusted_hops: int = 1
    keyspace: str = "pathgate"
    redis_url: Optional[str] = None

    @classmethod
    def from_provider(
        cls,
        provider: ConfigProvider,
        route_specs: Sequence[RouteSpec] = DEFAULT_ROUTES,
    ) -> "GatewayConfig":
        """Build the configuration from flat string keys.

        Every backend key referenced by route_specs is required;
        the first missing one raises MissingConfigError.
        """
        routes = [
            Route(spec.prefix, require(provider, spec.service), spec.suffix)
            for spec in route_specs
        ]

        rate_limit = RateLimitConfig(
            quota=optional_int(provider, "RATE_LIMIT_MAX", DEFAULT_RATE_LIMIT_MAX, minimum=1),
            duration=optional_int(provider, "RATE_LIMIT_WINDOW", DEFAULT_RATE_LIMIT_WINDOW, minimum=1),
            error_message=provider.get("RATE_LIMIT_MESSAGE") or DEFAULT_RATE_LIMIT_MESSAGE,
        )

        return cls(
            routes=routes,
            port=optional_int(provider, "PORT", DEFAULT_PORT, minimum=1),
            host=provider.get("HOST") or DEFAULT_HOST,
            rate_limit=rate_limit,
            forward=ForwardConfig(timeout=optional_float(provider, "FORWARD_TIMEOUT")),
            trusted_hops=optional_int(provider, "TRUST_PROXY_HOPS", 1),
            redis_url=provider.get("REDIS_URL") or None,
        )

    @classmethod
    def from_file(
        cls,
        file_path: Union[str, Path],
        provider: Optional[ConfigProvider] = None,
        namespace: str = "pathgate",
    ) -> "GatewayConfig":
        """Load gateway configuration from a YAML file.

        Args:
            file_path: Path to the YAML configuration file
            provider: Resolves `service` keys and fills in values the file omits
            namespace: Namespace in the YAML file (e.g., "pathgate" or "tool.pathgate")

        Example YAML structure:
        ```yaml
        pathgate:
          port: 3000
          trusted_hops: 1

          routes:
            - prefix: "/api/v1/auth"
              service: "BASE_MICROSERVICE"
              suffix: "/auth"
            - prefix: "/api/v1/products"
              target: "http://products:8080"
              suffix: "/products"

          rate_limit:
            quota: 100
            duration: 120

          forward:
            timeout: 30
        ```
        """
        provider = provider or MappingConfigProvider()

        file_path = Path(file_path)
        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {file_path}: {exc}") from exc

        config_data = data or {}
        for part in namespace.split("."):
            if not isinstance(config_data, dict) or part not in config_data:
                raise ConfigurationError(f"Namespace '{namespace}' not found in {file_path}")
            config_data = config_data[part]

        config_data = _expect_mapping(namespace, config_data or {})
        return cls._from_dict(config_data, provider)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any], provider: ConfigProvider) -> "GatewayConfig":
        """Create GatewayConfig from dictionary data; file values win over provider keys."""
        base = cls.from_provider(provider, route_specs=())

        routes_data = data.get("routes") or []
        if not isinstance(routes_data, list):
            raise ConfigurationError(
                f"routes must be a list, got {type(routes_data).__name__}", key="routes"
            )
        routes = [cls._parse_route(route_data, provider) for route_data in routes_data]
        if not routes:
            raise ConfigurationError("At least one route must be configured")

        rate_limit = base.rate_limit
        if "rate_limit" in data:
            rate_limit = cls._parse_rate_limit(data["rate_limit"], base.rate_limit)

        forward = base.forward
        if "forward" in data:
            forward_data = _expect_mapping("forward", data["forward"] or {})
            timeout = forward_data.get("timeout")
            forward = ForwardConfig(
                timeout=None if timeout is None else _as_number("forward.timeout", timeout, float, 0)
            )

        return cls(
            routes=routes,
            port=_as_number("port", data.get("port", base.port), int, 1),
            host=data.get("host", base.host),
            rate_limit=rate_limit,
            forward=forward,
            trusted_hops=_as_number("trusted_hops", data.get("trusted_hops", base.trusted_hops), int, 0),
            keyspace=data.get("keyspace", base.keyspace),
            redis_url=data.get("redis_url", base.redis_url),
        )

    @staticmethod
    def _parse_route(route_data: Dict[str, Any], provider: ConfigProvider) -> Route:
        route_data = _expect_mapping("routes[]", route_data)
        if "prefix" not in route_data:
            raise ConfigurationError(f"Route is missing 'prefix': {route_data}")

        if "target" in route_data:
            backend_url = str(route_data["target"])
        elif "service" in route_data:
            backend_url = require(provider, route_data["service"])
        else:
            raise ConfigurationError(
                f"Route {route_data['prefix']} needs either 'service' or 'target'"
            )
        return Route(route_data["prefix"], backend_url, route_data.get("suffix", ""))

    @staticmethod
    def _parse_rate_limit(
        rate_limit_data: Optional[Dict[str, Any]], base: Optional[RateLimitConfig]
    ) -> Optional[RateLimitConfig]:
        # an explicit `rate_limit: null` disables the gate
        if rate_limit_data is None:
            return None

        rate_limit_data = _expect_mapping("rate_limit", rate_limit_data)
        base = base or RateLimitConfig()
        return RateLimitConfig(
            quota=_as_number("rate_limit.quota", rate_limit_data.get("quota", base.quota), int, 1),
            duration=_as_number(
                "rate_limit.duration", rate_limit_data.get("duration", base.duration), float, 1
            ),
            error_status=rate_limit_data.get("error_status", base.error_status),
            error_message=rate_limit_data.get("error_message", base.error_message),
        )
