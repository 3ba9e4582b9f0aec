from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Text, DateTime, func,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
import enum

from .database import Base
from .settings.config import settings


class ConversationRole(str, enum.Enum):
    user = "user"
    assistant = "assistant"


# ---------------------------
# USER MODEL
# ---------------------------
class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    username = Column(String, index=True)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    # debited per revision attempt, topped up by payments
    credits = Column(Integer, nullable=False, default=settings.STARTING_CREDITS)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    projects = relationship(
        "WebsiteProject",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (CheckConstraint("credits >= 0", name="ck_user_credits_non_negative"),)


# ---------------------------
# PROJECTS
# ---------------------------
class WebsiteProject(Base):
    __tablename__ = "website_project"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String(128), nullable=False, default="Untitled project")
    initial_prompt = Column(Text, nullable=True)

    current_code = Column(Text, nullable=False, default="")
    # id of the live Version of this project; NULL after a manual save
    current_version_index = Column(Integer, nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)

    # optimistic concurrency counter, bumped on every UPDATE
    lock_version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    owner = relationship("User", back_populates="projects")
    versions = relationship(
        "Version",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Version.id",
    )
    conversations = relationship(
        "Conversation",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Conversation.id",
    )

    __mapper_args__ = {"version_id_col": lock_version, "eager_defaults": True}
    __table_args__ = (Index("ix_website_project_published", "is_published"),)

    def __repr__(self):
        return f"<WebsiteProject {self.id} user={self.user_id}>"


class Version(Base):
    """Immutable HTML snapshot a project can be rolled back to."""
    __tablename__ = "version"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("website_project.id", ondelete="CASCADE"), index=True, nullable=False)
    code = Column(Text, nullable=False)
    description = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("WebsiteProject", back_populates="versions")

    __mapper_args__ = {"eager_defaults": True}


class Conversation(Base):
    """Append-only chat/audit trail of a project."""
    __tablename__ = "conversation"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("website_project.id", ondelete="CASCADE"), index=True, nullable=False)
    role = Column(String(16), nullable=False)  # user|assistant
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("WebsiteProject", back_populates="conversations")

    __mapper_args__ = {"eager_defaults": True}
