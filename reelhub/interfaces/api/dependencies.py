"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from reelhub.infrastructure.notifications import NotificationGateway, NotificationHub
from reelhub.infrastructure.security import user_id_from_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def get_current_user_id(token: str = Depends(oauth2_scheme)) -> int:
    """Return the user id carried by the bearer token."""

    try:
        return user_id_from_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_notification_hub(request: Request) -> NotificationHub:
    """Return the hub created for the running application."""

    return request.app.state.notification_hub


def get_notification_gateway(request: Request) -> NotificationGateway:
    """Return the storage gateway shared with the hub."""

    return request.app.state.notification_gateway
