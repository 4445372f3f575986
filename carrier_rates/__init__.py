"""
Carrier Rates v1.0.0

Shipping-rate aggregation across carrier REST APIs:
- OAuth client-credentials token lifecycle (core.token_manager)
- JSON transport gateway (core.http_client)
- Carrier adapters (modules.shipping.carriers)
- Multi-carrier aggregation with partial success (services.rate_service)
"""
__version__ = "1.0.0"
