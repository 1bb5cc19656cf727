"""
API module for FastAPI routes.

This module organizes all API endpoints by domain/feature.
Each route module defines a FastAPI APIRouter that can be
mounted on the main application.
"""

from api.routes import chat, health, photos, recommend

__all__ = ["chat", "health", "photos", "recommend"]
