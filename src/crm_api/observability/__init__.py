"""
crm_api.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Correlation-id propagation for consistent log enrichment.
"""

# Package marker.
