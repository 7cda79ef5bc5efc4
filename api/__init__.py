"""
REST API module.

- v1/keys: client-facing validation endpoints
- v1/admin: administrative endpoints (X-Admin-Password)
"""
