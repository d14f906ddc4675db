"""
Shared request dependencies.
"""

from typing import Optional

from fastapi import HTTPException, status

from catalog.database import CatalogDatabaseService

# Set by the application lifespan once the database connection is up
db_service: Optional[CatalogDatabaseService] = None


def get_db_service() -> CatalogDatabaseService:
    """Return the database service, or fail with 500 when it is not connected."""
    if db_service is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return db_service
