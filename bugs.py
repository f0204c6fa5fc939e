from fastapi import APIRouter, Depends, Body, Response
from typing import Any, List
from models import User
from repositories import ProjectRepository, BugRepository
from schemas import BugFields, BugRead
from auth import get_current_user
from deps import get_project_repository, get_bug_repository
from exceptions import NotFoundError, KEYS_NOT_ALLOWED
from validation import check_body, convert_dates, parse_id
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["bugs"])

DATE_KEYS = ["due_date", "end_date"]
CREATE_KEYS = ["title", "description", "priority", "status", "due_date"]
UPDATE_KEYS = ["title", "description", "priority", "status", "due_date", "end_date"]

@router.get("/project/{project_id}/bug", response_model=List[BugRead])
def list_project_bugs(project_id: str, bugs: BugRepository = Depends(get_bug_repository)):
    pid = parse_id(project_id, "Unvalid projectId")
    # a deleted (or never created) project simply has no bugs left
    return [BugRead.model_validate(b) for b in bugs.find_by_project(pid)]

@router.get("/bug/{bug_id}", response_model=BugRead)
def get_bug(bug_id: str, bugs: BugRepository = Depends(get_bug_repository)):
    bid = parse_id(bug_id)
    b = bugs.find_by_id(bid)
    if b is None:
        raise NotFoundError()
    return BugRead.model_validate(b)

@router.post("/project/{project_id}/bug", response_model=BugRead)
def add_bug_to_project(project_id: str, body: Any = Body(default=None),
                       projects: ProjectRepository = Depends(get_project_repository),
                       bugs: BugRepository = Depends(get_bug_repository),
                       current: User = Depends(get_current_user)):
    pid = parse_id(project_id, "Unvalid projectId")
    values = check_body(body, allowed=CREATE_KEYS, required=["title"], fields=BugFields)
    values = convert_dates(values, DATE_KEYS)
    project = projects.find_by_id(pid)
    if project is None:
        raise NotFoundError()
    values["project_id"] = project.id
    bug = bugs.save(bugs.create(values))
    logger.info(f"Bug {bug.id} added to project {project.id} by user {current.id}")
    return BugRead.model_validate(bug)

@router.put("/bug/{bug_id}", response_model=BugRead)
def update_bug(bug_id: str, body: Any = Body(default=None),
               bugs: BugRepository = Depends(get_bug_repository),
               current: User = Depends(get_current_user)):
    bid = parse_id(bug_id)
    values = check_body(body, allowed=UPDATE_KEYS, fields=BugFields, keys_message=KEYS_NOT_ALLOWED)
    values = convert_dates(values, DATE_KEYS)
    b = bugs.find_by_id(bid)
    if b is None:
        raise NotFoundError()
    b = bugs.save(bugs.merge(b, values))
    return BugRead.model_validate(b)

@router.delete("/bug/{bug_id}")
def delete_bug(bug_id: str,
               bugs: BugRepository = Depends(get_bug_repository),
               current: User = Depends(get_current_user)):
    bid = parse_id(bug_id)
    b = bugs.find_by_id(bid)
    if b is None:
        raise NotFoundError()
    bugs.delete(b)
    return Response(status_code=200)
