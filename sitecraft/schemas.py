from fastapi_users import schemas
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

# =========================
# USER SCHEMAS
# =========================
class UserRead(schemas.BaseUser[int]):
    username: Optional[str] = None
    credits: int = 0

class UserCreate(schemas.BaseUserCreate):
    username: Optional[str] = None

class UserUpdate(schemas.BaseUserUpdate):
    username: Optional[str] = None


# =========================
# VERSION / CONVERSATION SCHEMAS
# =========================
class VersionRead(BaseModel):
    id: int
    project_id: int
    code: str
    description: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ConversationRead(BaseModel):
    id: int
    project_id: int
    role: str
    content: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =========================
# PROJECT SCHEMAS
# =========================
class ProjectSummary(BaseModel):
    id: int
    user_id: int
    name: str
    current_version_index: Optional[int] = None
    is_published: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ProjectRead(ProjectSummary):
    initial_prompt: Optional[str] = None
    current_code: str = ""
    versions: List[VersionRead] = []
    conversations: List[ConversationRead] = []

class ProjectOwner(BaseModel):
    id: int
    username: Optional[str] = None

    class Config:
        from_attributes = True

class PublishedProjectRead(ProjectSummary):
    current_code: str = ""
    owner: Optional[ProjectOwner] = None


# =========================
# REQUEST BODIES
# =========================
# Fields are optional so blank/missing values reach the service checks
# in their defined order instead of failing request validation.
class RevisionRequest(BaseModel):
    message: Optional[str] = None

class SaveCodeRequest(BaseModel):
    code: Optional[str] = None

class ProjectCreate(BaseModel):
    name: Optional[str] = None
    initial_prompt: Optional[str] = None
    initial_code: Optional[str] = None

class PublishUpdate(BaseModel):
    is_published: bool
