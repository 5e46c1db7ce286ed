"""
app/api/routers package marker.
"""

from app.api.routers.annotation_router import router as annotation_router
from app.api.routers.coverage_router import router as coverage_router
from app.api.routers.upload_router import router as upload_router

__all__ = [
    "annotation_router",
    "coverage_router",
    "upload_router",
]
