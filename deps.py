from fastapi import Depends
from database import get_session
from sqlmodel import Session
from repositories import ProjectRepository, BugRepository, UserRepository

def get_project_repository(db: Session = Depends(get_session)) -> ProjectRepository:
    return ProjectRepository(db)

def get_bug_repository(db: Session = Depends(get_session)) -> BugRepository:
    return BugRepository(db)

def get_user_repository(db: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(db)
