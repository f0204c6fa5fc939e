from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import selectinload
from sqlmodel import Session, SQLModel, select, or_

from models import Project, Bug, User

ModelT = TypeVar("ModelT", bound=SQLModel)


class Repository(Generic[ModelT]):
    """Persistence operations for one table, bound to a request's session."""

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    def find_all(self) -> List[ModelT]:
        return list(self.session.exec(select(self.model)).all())

    def find_by_id(self, entity_id: int) -> Optional[ModelT]:
        return self.session.get(self.model, entity_id)

    def find_one_by(self, **fields) -> Optional[ModelT]:
        stmt = select(self.model)
        for name, value in fields.items():
            stmt = stmt.where(getattr(self.model, name) == value)
        return self.session.exec(stmt).first()

    def create(self, values: dict) -> ModelT:
        return self.model(**values)

    def merge(self, entity: ModelT, values: dict) -> ModelT:
        for name, value in values.items():
            setattr(entity, name, value)
        return entity

    def save(self, entity: ModelT) -> ModelT:
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        self.session.delete(entity)
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class ProjectRepository(Repository[Project]):
    model = Project

    def find_with_bugs(self, project_id: int) -> Optional[Project]:
        stmt = select(Project).where(Project.id == project_id).options(selectinload(Project.bugs))
        return self.session.exec(stmt).first()


class BugRepository(Repository[Bug]):
    model = Bug

    def find_by_project(self, project_id: int) -> List[Bug]:
        stmt = select(Bug).where(Bug.project_id == project_id).order_by(Bug.id)
        return list(self.session.exec(stmt).all())


class UserRepository(Repository[User]):
    model = User

    def find_conflicting(self, username: Optional[str], email: Optional[str],
                         exclude_id: Optional[int] = None) -> Optional[User]:
        """First other user holding the given username or email, if any."""
        clauses = []
        if username is not None:
            clauses.append(User.username == username)
        if email is not None:
            clauses.append(User.email == email)
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.exec(stmt).first()
