"""
Standardized API response models and utilities.
"""

from typing import Optional, Any, List
from pydantic import BaseModel, Field
from datetime import datetime


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: Optional[str] = Field(None, description="Service version")
    database: str = Field(..., description="Database connectivity")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow, description="Check timestamp"
    )


def paginated_response(items: List[Any], total: int, page: int, limit: int) -> dict:
    """Create a standardized paginated response"""
    total_pages = (total + limit - 1) // limit if limit else 0
    return {
        "success": True,
        "data": items,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": total_pages,
        },
    }
