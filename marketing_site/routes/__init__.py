# marketing_site/routes/__init__.py
"""
API route handlers.
"""

from marketing_site.routes.contact import router as contact_router
from marketing_site.routes.health import router as health_router

__all__ = [
    "contact_router",
    "health_router",
]
