from typing import Annotated

from fastapi import Depends, Header, HTTPException

from config import Settings, get_settings


def require_admin(
    settings: Annotated[Settings, Depends(get_settings)],
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Strict admin-only guard. Requires the X-Admin-Token header to match ADMIN_TOKEN.
    """
    if not settings.admin_token:
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured on server.")
    if x_admin_token != settings.admin_token:
        raise HTTPException(status_code=401, detail="Unauthorized.")


def require_client(
    settings: Annotated[Settings, Depends(get_settings)],
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Client/API guard. Accepts either:
      - X-Admin-Token that matches ADMIN_TOKEN (admins always allowed), or
      - X-Api-Key that matches MATHTEST_API_KEY.
    Account state (pending/active) is decided upstream; callers reaching
    this point are already approved.
    """
    if settings.admin_token and x_admin_token == settings.admin_token:
        return

    if not settings.api_key:
        raise HTTPException(status_code=500, detail="MATHTEST_API_KEY not configured on server.")
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Unauthorized.")
