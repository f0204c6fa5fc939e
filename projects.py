from fastapi import APIRouter, Depends, Body, Response
from typing import Any, List
from models import User
from repositories import ProjectRepository
from schemas import ProjectFields, ProjectRead, ProjectWithBugs
from auth import get_current_user
from deps import get_project_repository
from exceptions import NotFoundError, KEYS_NOT_ALLOWED
from validation import check_body, parse_id
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/project", tags=["projects"])

PROJECT_KEYS = ["title", "description"]

@router.get("", response_model=List[ProjectRead])
def list_projects(projects: ProjectRepository = Depends(get_project_repository)):
    return [ProjectRead.model_validate(p) for p in projects.find_all()]

@router.get("/{project_id}", response_model=ProjectWithBugs)
def get_project(project_id: str, projects: ProjectRepository = Depends(get_project_repository)):
    pid = parse_id(project_id)
    p = projects.find_with_bugs(pid)
    if p is None:
        raise NotFoundError()
    # eager loaded bugs, serialize while the session is open
    return ProjectWithBugs.model_validate(p)

@router.post("", response_model=ProjectRead)
def create_project(body: Any = Body(default=None),
                   projects: ProjectRepository = Depends(get_project_repository),
                   current: User = Depends(get_current_user)):
    values = check_body(body, allowed=PROJECT_KEYS, required=["title"], fields=ProjectFields)
    project = projects.save(projects.create(values))
    logger.info(f"Project {project.id} created by user {current.id}")
    return ProjectRead.model_validate(project)

@router.put("/{project_id}", response_model=ProjectRead)
def update_project(project_id: str, body: Any = Body(default=None),
                   projects: ProjectRepository = Depends(get_project_repository),
                   current: User = Depends(get_current_user)):
    pid = parse_id(project_id)
    values = check_body(body, allowed=PROJECT_KEYS, fields=ProjectFields, keys_message=KEYS_NOT_ALLOWED)
    p = projects.find_by_id(pid)
    if p is None:
        raise NotFoundError()
    p = projects.save(projects.merge(p, values))
    return ProjectRead.model_validate(p)

@router.delete("/{project_id}")
def delete_project(project_id: str,
                   projects: ProjectRepository = Depends(get_project_repository),
                   current: User = Depends(get_current_user)):
    pid = parse_id(project_id)
    p = projects.find_by_id(pid)
    if p is None:
        raise NotFoundError()
    # bugs go with it (cascade on Project.bugs)
    projects.delete(p)
    logger.info(f"Project {pid} deleted by user {current.id}")
    return Response(status_code=200)
