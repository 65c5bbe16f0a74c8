# assetdex/helpers/db_utils.py
"""
Database utility functions for entity lookups and transactional error handling.
"""
from contextlib import contextmanager
from typing import Any, Optional, Type, TypeVar

from fastapi import HTTPException, status
from sqlalchemy import exc, func
from sqlalchemy.orm import Session

from assetdex.rack_space.errors import RackSpaceError

ModelType = TypeVar("ModelType")


def get_entity_by_name(
    db: Session,
    model_class: Type[ModelType],
    name: str,
    error_message: Optional[str] = None,
    *,
    lock: bool = False,
) -> ModelType:
    """
    Get entity by name (case-insensitive) with proper exception handling.

    Args:
        db: Database session
        model_class: SQLAlchemy model class
        name: Entity name to search for
        error_message: Custom error message (optional)
        lock: Take a row lock (SELECT ... FOR UPDATE) until the transaction ends

    Returns:
        Entity instance

    Raises:
        HTTPException: If entity not found
    """
    try:
        query = db.query(model_class).filter(func.upper(model_class.name) == func.upper(name))
        if lock:
            query = query.with_for_update()
        entity = query.first()
    except exc.SQLAlchemyError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error while fetching {model_class.__name__}: {str(e)}",
        )

    if not entity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_message or f"{model_class.__name__} with name '{name}' not found",
        )
    return entity


def get_entity_by_id(
    db: Session,
    model_class: Type[ModelType],
    entity_id: Any,
    error_message: Optional[str] = None,
) -> ModelType:
    """Get entity by primary key, raising 404 when it does not exist."""
    try:
        entity = db.get(model_class, entity_id)
    except exc.SQLAlchemyError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error while fetching {model_class.__name__}: {str(e)}",
        )

    if not entity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_message or f"{model_class.__name__} with id '{entity_id}' not found",
        )
    return entity


@contextmanager
def db_operation(db: Session, operation_name: str = "database operation"):
    """
    Context manager for database operations with proper exception handling.

    HTTP and rack-space errors are re-raised unchanged after a rollback so the
    router can map them; anything else becomes a 409 or 500.

    Usage:
        with db_operation(db, "move server"):
            # database operations
            db.commit()
    """
    try:
        yield
    except (HTTPException, RackSpaceError):
        db.rollback()
        raise
    except exc.IntegrityError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Database integrity error during {operation_name}: {str(e.orig)}",
        )
    except exc.SQLAlchemyError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error during {operation_name}: {str(e)}",
        )
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Unexpected error during {operation_name}: {str(e)}",
        )
