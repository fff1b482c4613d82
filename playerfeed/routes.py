"""
HTTP routes for the player accounts and feed API.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from playerfeed.auth import get_current_user
from playerfeed.dependencies import get_feed_store, get_user_store
from playerfeed.feeds import CallerIdentity, FeedStore, UploadedVideo
from playerfeed.schemas import (
    CreateFeedRequest,
    CreateUserRequest,
    DeleteUserResponse,
    FeedEntry,
    ListFeedsResponse,
    ListUsersResponse,
    LoginRequest,
    LoginResponse,
    UpdateUserResponse,
    UserProfile,
    UserUpdate,
)
from playerfeed.users import UserStore


router = APIRouter()

DEFAULT_PAGE_SIZE = 10


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/user", response_model=UserProfile, status_code=201)
def create_user(
    payload: CreateUserRequest, users: UserStore = Depends(get_user_store)
):
    return users.create(payload)


@router.post("/user/login", response_model=LoginResponse)
def login(payload: LoginRequest, users: UserStore = Depends(get_user_store)):
    return users.login(payload.email, payload.password)


@router.get("/user/profile", response_model=UserProfile)
def get_profile(
    caller: CallerIdentity = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    # UserProfile has no password field, so the stored hash is dropped here.
    return users.get_by_id(caller.id)


@router.put("/user", response_model=UpdateUserResponse)
def update_user(
    payload: UserUpdate,
    caller: CallerIdentity = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    return users.update(caller.id, payload)


@router.delete("/user", response_model=DeleteUserResponse)
def delete_user(
    caller: CallerIdentity = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    return users.delete(caller.id)


@router.get("/user", response_model=ListUsersResponse)
def list_users(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    next_page: Optional[str] = Query(
        None, alias="next", description="Cursor from a previous page"
    ),
    caller: CallerIdentity = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    page = users.list_users(limit, next_page)
    page["users"] = [
        {name: value for name, value in item.items() if name != "password"}
        for item in page["users"]
    ]
    return page


@router.post("/feed", response_model=FeedEntry, status_code=201)
async def create_feed(
    caption: str = Form(..., min_length=1, max_length=2200),
    video: Optional[UploadFile] = File(None),
    caller: CallerIdentity = Depends(get_current_user),
    feeds: FeedStore = Depends(get_feed_store),
):
    upload = None
    if video is not None and video.filename:
        data = await video.read()
        upload = UploadedVideo(
            filename=video.filename,
            content_type=video.content_type or "",
            data=data,
            size=len(data),
        )
    fields = CreateFeedRequest(caption=caption)
    # boto3 is blocking; keep it off the event loop.
    return await run_in_threadpool(feeds.create, upload, fields, caller)


@router.get("/feed", response_model=ListFeedsResponse)
def list_feeds(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    next_page: Optional[str] = Query(
        None, alias="next", description="Cursor from a previous page"
    ),
    caller: CallerIdentity = Depends(get_current_user),
    feeds: FeedStore = Depends(get_feed_store),
):
    return feeds.list_feeds(limit, next_page)
