from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)

class UserRegisterRequest(LoginRequest):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None

class TokenResponse(BaseModel):
    token: str
