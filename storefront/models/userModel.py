from datetime import datetime

from beanie import Document
from typing import Optional
from pydantic import Field
from fastapi_users.db import BeanieBaseUser, BeanieUserDatabase


class User(BeanieBaseUser, Document):
    """Shop customer. Admins are users with ``is_superuser`` set."""
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings(BeanieBaseUser.Settings):
        name = "users"

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane.doe@example.com",
                "hashed_password": "supersecretpassword",
                "full_name": "Jane Doe",
                "phone_number": "+15551234567"
            }
        }


async def get_user_db():
    yield BeanieUserDatabase(User)
