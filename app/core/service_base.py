"""
Base Service Class with Enhanced Error Handling
"""

import logging
from typing import Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from app.core.exceptions import (
    DatabaseError,
    ResourceNotFoundError,
    ConflictError,
    ValidationError,
    field_error
)

logger = logging.getLogger(__name__)


class BaseService:
    """Base service class with common error handling patterns."""

    def __init__(self, db: Session):
        self.db = db

    def safe_commit(
        self,
        error_message: str = "Database operation failed",
        resource_type: str = "Resource"
    ) -> bool:
        """Commit the transaction, rolling back and translating store errors."""
        try:
            self.db.commit()
            return True
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error during commit: {str(e)}")
            raise ConflictError(
                resource_type=resource_type,
                error_data={"original_error": str(e)}
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during commit: {str(e)}")
            raise DatabaseError(
                detail=error_message,
                error_data={"original_error": str(e)}
            )

    def get_or_404(self, query, resource_id: str, resource_type: str):
        """Return the first row of a query or raise 404 error."""
        try:
            resource = query.first()
        except SQLAlchemyError as e:
            logger.error(f"Database error in get_or_404: {str(e)}")
            raise DatabaseError(
                detail=f"Error retrieving {resource_type}",
                error_data={"resource_id": resource_id, "original_error": str(e)}
            )

        if resource is None:
            raise ResourceNotFoundError(resource_type=resource_type, resource_id=resource_id)
        return resource

    def check_unique_constraint(
        self,
        query,
        model_class,
        field_label: str,
        field_value: Any,
        resource_type: str = None,
        exclude_id: str = None
    ):
        """Raise ConflictError when the scoped query already matches a row."""
        try:
            if exclude_id:
                query = query.filter(model_class.id != exclude_id)
            existing = query.first()
        except SQLAlchemyError as e:
            logger.error(f"Database error in unique constraint check: {str(e)}")
            raise DatabaseError(
                detail=f"Error checking uniqueness for {field_label}",
                error_data={"field": field_label, "original_error": str(e)}
            )

        if existing:
            raise ConflictError(
                resource_type=resource_type or model_class.__name__,
                field=field_label,
                value=field_value
            )

    def paginate_query(self, query, page: int = 1, limit: int = 10):
        """Apply 1-indexed page/limit pagination to a query."""
        errors = []
        if page < 1:
            errors.append(field_error("page", "Page must be a positive integer", page))
        if limit < 1 or limit > 100:
            errors.append(field_error("limit", "Limit must be between 1 and 100", limit))
        if errors:
            raise ValidationError(errors=errors)

        return query.offset((page - 1) * limit).limit(limit)

    def log_service_action(
        self,
        action: str,
        resource_type: str = None,
        resource_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log service actions for auditing."""
        log_data = {
            "action": action,
            "service": self.__class__.__name__
        }

        if resource_type:
            log_data["resource_type"] = resource_type
        if resource_id:
            log_data["resource_id"] = resource_id
        if extra_data:
            log_data.update(extra_data)

        logger.info(f"Service action: {action}", extra=log_data)
