from pydantic import BaseModel

class LogoutResponse(BaseModel):
    message: str
    blacklisted: bool

class CheckResponse(BaseModel):
    blacklisted: bool

class RemoveResponse(BaseModel):
    removed: bool

class CleanupResponse(BaseModel):
    removed: int

class CountResponse(BaseModel):
    count: int

class ProtectedResponse(BaseModel):
    message: str
