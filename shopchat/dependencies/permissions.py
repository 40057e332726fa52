"""
FastAPI dependencies for access control.

HTTP endpoints exposing connection state require a verified bearer token,
the same credential the messages gateway accepts.
"""

from fastapi import HTTPException, Request, status

from shopchat.logging import logger


async def require_authenticated(request: Request) -> None:
    """
    Dependency rejecting requests without a verified bearer token.

    Example:
        ```python
        from fastapi import APIRouter, Depends
        from shopchat.dependencies import require_authenticated

        router = APIRouter()


        @router.get("/ws/messages/clients", dependencies=[Depends(require_authenticated)])
        async def connected_clients(): ...
        ```

    Raises:
        HTTPException: 401 if the request carries no verified token.
    """
    if not request.user or not request.user.is_authenticated:
        logger.debug(f"Anonymous request to {request.url.path} rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
