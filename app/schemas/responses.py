"""
Common Response Models for API Documentation
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Service status (healthy/unhealthy)")
    timestamp: float = Field(..., description="Unix timestamp of the check")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    dependencies: Optional[Dict[str, str]] = Field(None, description="Status of external dependencies")


class ServiceInfoResponse(BaseModel):
    """Root endpoint response model"""
    message: str = Field(..., description="Service banner")
    version: str = Field(..., description="Service version")
    status: str = Field(..., description="Service status")
    docs: str = Field(..., description="Swagger UI path")
    health: str = Field(..., description="Health check path")
    endpoints: List[str] = Field(default_factory=list, description="Migration trigger paths")
