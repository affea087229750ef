from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Response schema for POST /uploads."""
    url: str


class ErrorResponse(BaseModel):
    """Error body returned by POST /uploads."""
    message: str
