from fastapi import Depends, HTTPException, status
from fastapi_users import models
import logging

from .services.errors import WorkflowError
from .users import fastapi_users

logger = logging.getLogger(__name__)


# Dependency to enforce authentication; the acting user is handed to each
# handler explicitly and passed on to services as a plain user id.
async def require_authenticated_user(
    user: models.UP = Depends(fastapi_users.current_user(active=True)),
):
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def http_error(exc: Exception) -> HTTPException:
    """Translate a service failure into the HTTP error the client sees."""
    if isinstance(exc, WorkflowError):
        return HTTPException(status_code=exc.status_code, detail=exc.message)
    logger.exception("Unexpected error: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Something went wrong, please try again",
    )
