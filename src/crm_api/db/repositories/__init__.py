"""
crm_api.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for the persistence layer.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Listing methods take the caller's (user_id, role) and apply owner scoping; point
# lookups do not, since the owned-by policy has already run for them.
