import os
from typing import Optional

import uvicorn

from pathgate._logs import logger, setup_logging
from pathgate.asgi import ASGIGateway, create_gateway
from pathgate.config import ConfigProvider, EnvConfigProvider, GatewayConfig
from pathgate.errors import ConfigurationError


def default_provider() -> EnvConfigProvider:
    return EnvConfigProvider(env_file=".env" if os.path.exists(".env") else None)


def load_config(provider: Optional[ConfigProvider] = None) -> GatewayConfig:
    """Read the gateway configuration, from GATEWAY_CONFIG_FILE when it is set."""
    provider = provider or default_provider()
    config_file = provider.get("GATEWAY_CONFIG_FILE")
    if config_file:
        return GatewayConfig.from_file(config_file, provider=provider)
    return GatewayConfig.from_provider(provider)


def create_app(provider: Optional[ConfigProvider] = None) -> ASGIGateway:
    return create_gateway(load_config(provider), logger=logger)


def run(provider: Optional[ConfigProvider] = None) -> None:
    provider = provider or default_provider()
    setup_logging((provider.get("LOG_LEVEL") or "INFO").upper())

    try:
        config = load_config(provider)
    except ConfigurationError as ce:
        logger.error("Invalid gateway configuration: %s", ce)
        raise SystemExit(1) from ce

    gateway = create_gateway(config, logger=logger)
    logger.info("API Gateway listening on port %d", config.port)
    # client identity is derived by the gateway itself
    uvicorn.run(gateway, host=config.host, port=config.port, proxy_headers=False)


if __name__ == "__main__":
    run()
