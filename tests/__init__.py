# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the widget service:
# - test_microservice.py: Route registration and request dispatch
# - test_exceptions.py: Error taxonomy and translation
# - test_auth.py: App-key authentication
# - test_widgets.py: Widget routes end to end
# - test_widget_store.py, test_slack_client.py, test_models.py: Unit tests
#
# Run tests with: pytest
# =============================================================================
