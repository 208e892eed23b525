from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """JWT token response schema."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field("bearer", description="Token type")
    user: "UserResponse | None" = Field(None, description="User information (optional)")


class UserResponse(BaseModel):
    """User profile response schema."""

    username: str = Field(..., description="Username")
    full_name: str | None = Field(None, description="Display name")
    email: str | None = Field(None, description="User email address")
    role: str = Field(..., description="Staff role used for menu visibility (e.g. Sales Manager)")
    is_admin: bool = Field(..., description="True when the role is the configured admin role")
