"""
Route modules for the API.

Each module exports a FastAPI APIRouter with endpoints
for a specific domain/feature.
"""

from api.routes import health
from api.routes import play
from api.routes import settings
from api.routes import shop

__all__ = ["health", "play", "settings", "shop"]
