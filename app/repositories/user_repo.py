# app/repositories/user_repo.py
from sqlmodel import Session

from app.models.user import User


class UserRepository:
    """
    Data access layer for User profiles.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, uid: str) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, uid)

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def increment_helps_given(self, session: Session, uid: str) -> User | None:
        """
        Read-modify-write bump of the helps counter.

        No-op (returns None) if the profile does not exist.
        """
        user = self.get_by_id(session, uid)
        if user is None:
            return None
        user.helps_given = (user.helps_given or 0) + 1
        return self.update(session, user)
