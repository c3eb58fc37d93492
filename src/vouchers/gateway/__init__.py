"""Payment gateway integration: notification authentication and status vocabulary.

Exposes the pieces the webhook pipeline needs from the gateway:
- get_gateway_config() for the shared server key
- verify_signature() / compute_signature() for notification authentication
- map_transaction_status() for translating gateway statuses
"""

from vouchers.gateway.config import GatewayConfig, GatewayConfigError, get_gateway_config
from vouchers.gateway.signature import compute_signature, verify_signature
from vouchers.gateway.status import FraudStatus, TransactionStatus, map_transaction_status

__all__ = [
    "FraudStatus",
    "GatewayConfig",
    "GatewayConfigError",
    "TransactionStatus",
    "compute_signature",
    "get_gateway_config",
    "map_transaction_status",
    "verify_signature",
]
