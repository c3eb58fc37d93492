"""Schema management for RDBMS-backed providers.

The default configuration keeps orders and vouchers in Protean's in-memory
provider, for which both functions are no-ops. When a provider points at
SQLite or PostgreSQL the aggregate tables (including the unique indexes on
order reference, voucher code and voucher order) are created and dropped
here.
"""

from protean.domain import Domain
from sqlalchemy import create_engine

RDBMS_PROVIDERS = ("sqlite", "postgresql")


def _rdbms_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in RDBMS_PROVIDERS:
            yield name, provider


def _register_models(domain: Domain, provider_name: str) -> None:
    # Touching the DAO makes Protean build and register the SQLAlchemy model
    for _, record in domain.registry.aggregates.items():
        if record.cls.meta_.provider == provider_name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create tables for every aggregate stored in an RDBMS provider."""
    with domain.domain_context():
        for name, provider in _rdbms_providers(domain):
            _register_models(domain, name)
            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))


def drop_db(domain: Domain) -> None:
    """Drop the tables created by ``setup_db``."""
    with domain.domain_context():
        for _, provider in _rdbms_providers(domain):
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
