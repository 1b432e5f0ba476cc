from pydantic import BaseModel, EmailStr


# Token schema for JWT authentication
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# Token data schema for decoded JWT payload
class TokenData(BaseModel):
    user_id: int


# Schema for login with email and password
class LoginRequest(BaseModel):
    email: EmailStr
    password: str
