# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - dependencies.py: Shared request dependencies (user context)
# - auth/: Supabase JWT validation and the /auth endpoints
# - routers/: API endpoint definitions organized by feature
# - websocket/: Exercise player socket and realtime user updates
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
