# storefront/repos/unit_of_work.py
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.domain.errors import PersistenceFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def step(name: str):
    """
    Tags any database error raised inside the block with the workflow step name.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Persistence failure in step {name}: {e}")
        raise PersistenceFailure(name, e) from e


class UnitOfWork:
    """
    Transaction boundary for one service operation.

    Commits when the block exits cleanly, rolls back on any exception
    (domain errors included), so a multi-step workflow is all or nothing.
    """

    def __init__(self, db: Session):
        self.db = db

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            logger.info(f"Rolling back unit of work after {exc_type.__name__}")
            self.db.rollback()
            return False

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Commit failed: {e}")
            raise PersistenceFailure("commit", e) from e
        return False
