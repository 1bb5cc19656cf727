"""
Route modules for the API.

Each module exports a FastAPI APIRouter with endpoints
for a specific domain/feature.
"""

from api.routes import chat
from api.routes import health
from api.routes import photos
from api.routes import recommend

__all__ = ["chat", "health", "photos", "recommend"]
