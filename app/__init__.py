# =============================================================================
# app/ - Microservice Package
# =============================================================================
# - microservice.py: the dispatcher (Microservice, ResourceRouter)
# - resource.py: the Resource contract concrete resources implement
# - exceptions.py: domain errors and the error translator
# - auth/: app-key authentication gate and the dont_log marker
# - routers/: built-in routes and the widget resource
# - config.py: environment variable loading and settings
# - main.py: application entry point
# =============================================================================
