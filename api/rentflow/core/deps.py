import secrets

from fastapi import Depends, Header, HTTPException, status

from rentflow.core.config import Settings, settings
from rentflow.services.gateway import NotificationGateway


def get_settings() -> Settings:
    return settings


def get_gateway(cfg: Settings = Depends(get_settings)) -> NotificationGateway:
    return NotificationGateway(cfg)


def require_service_key(
    authorization: str | None = Header(default=None),
    cfg: Settings = Depends(get_settings),
) -> None:
    """Job triggers are called by the scheduler with the service key as a bearer token."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token or not secrets.compare_digest(token, cfg.service_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid service key",
            headers={"WWW-Authenticate": "Bearer"},
        )
