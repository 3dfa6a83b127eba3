"""FastAPI dependencies for database access."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tuteasy.db.config import get_db
from tuteasy.db.repositories.tutor import TutorRepository


def get_tutor_repository(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TutorRepository:
    """Get a tutor repository bound to the request's session.

    Args:
        db: Database session

    Returns:
        TutorRepository for the request
    """
    return TutorRepository(db)
