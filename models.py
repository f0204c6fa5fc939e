from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship


class BugStatus(str, Enum):
    open = "open"
    close = "close"


# ============================================================
# PROJECT
# ============================================================

class Project(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None

    # --- RELACJE ---
    bugs: List["Bug"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Bug.id"},
    )


# ============================================================
# BUG
# ============================================================

class Bug(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    priority: int = Field(default=1, nullable=False)
    status: BugStatus = Field(default=BugStatus.open, nullable=False)
    start_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
    due_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    project_id: int = Field(foreign_key="project.id", index=True, nullable=False)

    # --- RELACJE ---
    project: Optional[Project] = Relationship(back_populates="bugs")


# ============================================================
# USER
# ============================================================

class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True, nullable=False)
    email: str = Field(index=True, unique=True, nullable=False)
    # bcrypt digest, never part of a response schema
    password_hash: str = Field(max_length=60, nullable=False)
