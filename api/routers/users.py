"""User API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional
from database.db_manager import DatabaseManager
from api.dependencies import get_db
from models import User, UserPreferences

router = APIRouter()


class CreateUserRequest(BaseModel):
    email: str
    name: str
    handicap: float = 0
    avatar: Optional[str] = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    handicap: Optional[float] = Field(None, ge=-10, le=54)
    avatar: Optional[str] = None
    preferences: Optional[UserPreferences] = None


@router.post("", response_model=User, status_code=201)
async def create_user(req: CreateUserRequest, db: DatabaseManager = Depends(get_db)):
    user = User(**req.model_dump())
    return await db.call(lambda: db.users.create_user(user))


@router.get("/by-email/{email}", response_model=User)
async def get_user_by_email(email: str, db: DatabaseManager = Depends(get_db)):
    user = await db.call(lambda: db.users.get_user_by_email(email))
    if not user:
        raise HTTPException(404, "User not found")
    return user


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: str, db: DatabaseManager = Depends(get_db)):
    user = await db.call(lambda: db.users.get_user(user_id))
    if not user:
        raise HTTPException(404, "User not found")
    return user


@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    req: UpdateUserRequest,
    db: DatabaseManager = Depends(get_db),
):
    """Profile edit. Users are never deleted from the app."""
    updates = req.model_dump(exclude_none=True)
    return await db.call(lambda: db.users.update_user(user_id, **updates))
