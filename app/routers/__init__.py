# =============================================================================
# app/routers/ - Route Definitions
# =============================================================================
# - builtin.py: /version, /health, /schema and /error/{code}, registered by
#   the Microservice for every resource
# - widgets.py: the widget resource (CRUD + /message)
# =============================================================================
