"""
crm_api.authorization

Ownership-based authorization core.

Responsibilities:
- Per-endpoint ownership declarations (`metadata`).
- The allow/deny/not-found decision procedure (`evaluator`).
- Translation of decisions into HTTP outcomes (`translator`).
- The named `owned-by` policy wired as a FastAPI dependency (`policies`).
- Owner scoping for listing queries (`scoping`).

Supported shape: administrator override, otherwise strict single-owner match.
"""

# Package marker.
