from sqlmodel import SQLModel, create_engine, Session
import os
import models  # registers Project, Bug and User on SQLModel.metadata

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bug_tracker.db")

def make_engine(url: str, **kwargs):
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=False, **kwargs)

engine = make_engine(DATABASE_URL)

def init_db(bind=None):
    SQLModel.metadata.create_all(bind or engine)

def get_session():
    with Session(engine) as session:
        yield session
