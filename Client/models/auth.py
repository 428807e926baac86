"""
PatraKosh Client - Authentication Models

Pydantic models for login/signup requests and the token response.

Author: PatraKosh Project
"""

from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Request body for the login endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    username_or_email: str = Field(alias="usernameOrEmail")
    password: str


class SignupRequest(BaseModel):
    """Request body for the signup endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    username: str
    email: str
    password: str
    confirm_password: str = Field(alias="confirmPassword")


class UserProfile(BaseModel):
    """The signed-in user as returned by login/signup"""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    username: Optional[str] = None
    email: Optional[str] = None


class AuthResponse(BaseModel):
    """Response body for login and signup"""
    token: str
    user: Optional[UserProfile] = None
