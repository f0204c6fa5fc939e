import re
from datetime import datetime
from typing import Optional, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator, field_serializer

from models import BugStatus
from validation import is_iso_date_string, format_iso_date

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

# ----------------- FIELD VALUES (request side) -----------------
# Every field is optional by absence: the key gates decide what must be present,
# these models only judge the values of the keys that were sent.

class FieldsModel(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore")


class ProjectFields(FieldsModel):
    title: str = Field(default=None, min_length=1)
    description: Optional[str] = None


class BugFields(FieldsModel):
    title: str = Field(default=None, min_length=1)
    description: Optional[str] = None
    priority: int = Field(default=None, ge=-2**63, le=2**63 - 1)
    status: Literal["open", "close"] = None
    due_date: Optional[str] = None
    end_date: Optional[str] = None

    @field_validator("due_date", "end_date")
    @classmethod
    def check_iso_date(cls, value):
        if value is not None and not is_iso_date_string(value):
            raise ValueError("not a canonical ISO-8601 date")
        return value


class UserFields(FieldsModel):
    username: str = Field(default=None, min_length=1)
    email: str = None
    password: str = Field(default=None, min_length=1)
    password2: str = Field(default=None, min_length=1)

    @field_validator("email")
    @classmethod
    def check_email_shape(cls, value):
        if not EMAIL_PATTERN.search(value):
            raise ValueError("not an email")
        return value

    @model_validator(mode="after")
    def check_passwords_match(self):
        if "password2" in self.model_fields_set and self.password2 != self.password:
            raise ValueError("passwords do not match")
        return self

# ----------------- RESPONSES -----------------

class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    description: Optional[str]


class BugRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    title: str
    description: Optional[str]
    priority: int
    status: BugStatus
    start_date: datetime
    due_date: Optional[datetime]
    end_date: Optional[datetime]
    project_id: int

    @field_serializer("start_date", "due_date", "end_date")
    def serialize_dates(self, value: Optional[datetime]):
        return format_iso_date(value) if value is not None else None


class ProjectWithBugs(ProjectRead):
    bugs: List[BugRead] = []


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    email: str


class Token(BaseModel):
    token: str
