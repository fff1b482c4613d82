"""
Pydantic schemas for the player feed API.

Field names match the attribute names stored in DynamoDB.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Club(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    profilePicture: Optional[str] = None
    position: Optional[str] = None
    currentTeam: Optional[str] = None
    yearsOfExperience: Optional[int] = Field(default=None, ge=0)
    previousClubs: Optional[list[Club]] = None
    achievements: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    accessToken: str


class UserUpdate(BaseModel):
    """Sparse profile update: only the fields a client sends are written."""

    model_config = ConfigDict(extra="forbid")

    profilePicture: Optional[str] = None
    position: Optional[str] = None
    currentTeam: Optional[str] = None
    yearsOfExperience: Optional[int] = Field(default=None, ge=0)
    previousClubs: Optional[list[Club]] = None
    achievements: Optional[str] = None

    def changes(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class UserProfile(BaseModel):
    id: str
    name: str
    email: str
    profilePicture: Optional[str] = None
    position: Optional[str] = None
    currentTeam: Optional[str] = None
    yearsOfExperience: Optional[int] = None
    previousClubs: Optional[list[Club]] = None
    achievements: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class UpdateUserResponse(BaseModel):
    success: bool


class DeleteUserResponse(BaseModel):
    message: str


class ListUsersResponse(BaseModel):
    users: list[dict]
    nextPage: Optional[str] = None


class CreateFeedRequest(BaseModel):
    caption: str = Field(..., min_length=1, max_length=2200)


class FeedEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    caption: str
    videoUrl: str
    userId: str
    userName: Optional[str] = None
    profilePictureUrl: Optional[str] = None
    createdAt: str
    updatedAt: str


class ListFeedsResponse(BaseModel):
    feeds: list[FeedEntry]
    nextPage: Optional[str] = None
