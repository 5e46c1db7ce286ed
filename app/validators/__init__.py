"""
app/validators package marker.
"""

from app.validators.snapshot_validator import (
    ShapeErrorDetail,
    SnapshotHeaderValidator,
    SnapshotShapeError,
    fleet_header_validator,
    product_header_validator,
)

__all__ = [
    "ShapeErrorDetail",
    "SnapshotHeaderValidator",
    "SnapshotShapeError",
    "fleet_header_validator",
    "product_header_validator",
]
