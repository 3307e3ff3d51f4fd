from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for user registration requests
class UserCreate(UserBase):
    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    role: Literal["user", "authority"] = "user"

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Owner summary embedded in complaint payloads
class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Schema for JWT payload contents
class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None
