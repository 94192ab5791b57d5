"""
app/api/routers package marker.
"""

from app.api.routers.compliance_router import router as compliance_router
from app.api.routers.entity_router import router as entity_router
from app.api.routers.inspection_router import router as inspection_router
from app.api.routers.template_router import router as template_router

__all__ = [
    "compliance_router",
    "entity_router",
    "inspection_router",
    "template_router",
]
