"""
Base service layer for database operations on a single table
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

import asyncpg

logger = logging.getLogger(__name__)

# Error kinds carried by ServiceResult.error_type
VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
CONFLICT_ERROR = "CONFLICT_ERROR"
DATABASE_ERROR = "DATABASE_ERROR"


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, data: List[Dict[str, Any]]) -> "ServiceResult":
        return cls(success=True, data=data, count=len(data))

    @classmethod
    def fail(cls, error: str, error_type: str) -> "ServiceResult":
        return cls(success=False, error=error, error_type=error_type)

    @property
    def first(self) -> Optional[Dict[str, Any]]:
        """First record of the result, if any"""
        return self.data[0] if self.data else None


def serialize_row(row) -> Dict[str, Any]:
    """Convert an asyncpg Record into a JSON friendly dict"""
    data = dict(row)
    # Convert datetime objects to ISO strings
    for key, value in data.items():
        if hasattr(value, 'isoformat'):
            data[key] = value.isoformat()
    return data


class BaseService:
    """Base service holding the injected pool and the shared store error mapping"""

    def __init__(self, pool, table_name: str):
        self.pool = pool
        self.table_name = table_name

    def store_error(self, operation: str, error: Exception, **context) -> ServiceResult:
        """
        Log a store failure with its context and turn it into a ServiceResult.

        Unique violations become CONFLICT_ERROR, everything else DATABASE_ERROR.
        The message keeps the underlying error description.
        """
        details = ", ".join(f"{key}={value}" for key, value in context.items())
        if isinstance(error, asyncpg.UniqueViolationError):
            logger.warning(f"{operation} on {self.table_name} hit a unique constraint ({details}): {error}")
            return ServiceResult.fail(
                f"Unique constraint violation: {error}",
                CONFLICT_ERROR
            )

        logger.error(f"{operation} on {self.table_name} failed ({details}): {error}", exc_info=True)
        return ServiceResult.fail(str(error) or type(error).__name__, DATABASE_ERROR)
