"""Payment gateway configuration.

Reads the gateway credentials from the environment on every call so that a
rotated server key is picked up without a restart.

Environment variables:
    MIDTRANS_SERVER_KEY: server key shared with the gateway (server-side only)
"""

import os
from dataclasses import dataclass


class GatewayConfigError(Exception):
    """Raised when a required gateway setting is missing."""


@dataclass(frozen=True)
class GatewayConfig:
    server_key: str


def _require(name: str) -> str:
    value = os.environ.get(name, "")
    if not value.strip():
        raise GatewayConfigError(f"Missing required environment variable: {name}")
    return value


def get_gateway_config() -> GatewayConfig:
    """Return the current gateway configuration.

    Raises:
        GatewayConfigError: if MIDTRANS_SERVER_KEY is missing or blank.
    """
    return GatewayConfig(server_key=_require("MIDTRANS_SERVER_KEY"))
