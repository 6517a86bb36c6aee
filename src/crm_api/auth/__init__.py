"""
crm_api.auth

Authentication package.

Responsibilities:
- JWT helpers and validation.
- Starlette authentication backend that attaches verified claims to requests.
- Identity resolution (user id / role) from those claims.
"""

# Package marker.
