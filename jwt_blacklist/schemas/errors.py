from pydantic import BaseModel, Field

class Error400(BaseModel):
    detail: str = Field("Bad Request", json_schema_extra={"example": "Invalid token or token without expiration"})

class Error401(BaseModel):
    detail: str = Field("Unauthorized", json_schema_extra={"example": "Not authenticated"})

class Error403(BaseModel):
    detail: str = Field("Forbidden", json_schema_extra={"example": "Invalid admin key"})

class Error503(BaseModel):
    detail: str = Field("Service Unavailable", json_schema_extra={"example": "Blacklist storage unavailable"})

class RevokedError(BaseModel):
    error: str = Field("Token has been revoked", json_schema_extra={"example": "Token has been revoked"})
    message: str = Field("This token is no longer valid", json_schema_extra={"example": "This token is no longer valid"})
