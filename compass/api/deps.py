from contextlib import contextmanager
from typing import Iterator

import structlog
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from compass.core.errors import AppError, internal_error

logger = structlog.get_logger()


@contextmanager
def transactional(db: Session, commit: bool = True) -> Iterator[Session]:
    """Run a service call, commit on success and map service exceptions to HTTP errors.

    ValueError -> 400, PermissionError -> 403, AppError keeps its own status,
    anything else rolls back and becomes a 500 AppError.
    """
    try:
        yield db
        if commit:
            db.commit()
    except AppError:
        db.rollback()
        raise
    except ValueError as e:
        db.rollback()
        raise AppError(str(e), status_code=status.HTTP_400_BAD_REQUEST)
    except PermissionError as e:
        db.rollback()
        raise AppError(str(e), status_code=status.HTTP_403_FORBIDDEN)
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error("operation_failed", error=str(e), error_type=type(e).__name__, exc_info=True)
        raise internal_error(e) from e
