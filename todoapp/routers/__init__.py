"""
FastAPI routers grouped by concern.

Each module exposes an APIRouter included by todoapp.app.create_app. Routers
reach the ItemStore through request.app.state instead of building their own.
"""
