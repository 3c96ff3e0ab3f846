"""
LinkedIn Auth API v1 Endpoints

Upload, inspect and discard the LinkedIn session used for scraping, and
trigger the interactive login on the server's desktop.
"""

from typing import Dict, Any

from fastapi import APIRouter, Depends, HTTPException, status

from sales_tracker.api.deps import get_linkedin_auth_service, to_http_exception
from sales_tracker.core.exceptions import BaseApplicationException
from sales_tracker.core.security import ADMIN_SCOPE, get_current_user, require_scopes
from sales_tracker.schemas.scraper import (
    AuthStatusResponse,
    ClearSessionResponse,
    CookieUploadRequest,
    CookieUploadResponse,
    InteractiveLoginResponse,
)
from sales_tracker.services.linkedin_auth import LinkedInAuthService
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/linkedin-auth", tags=["linkedin-auth"])


@router.get("/status", response_model=AuthStatusResponse)
async def get_status(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LinkedInAuthService = Depends(get_linkedin_auth_service)
):
    """Whether a usable LinkedIn session exists for the caller."""
    return await service.status(current_user["user_id"])


@router.post("/upload-cookies", response_model=CookieUploadResponse)
async def upload_cookies(
    request: CookieUploadRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LinkedInAuthService = Depends(get_linkedin_auth_service)
):
    """Store a cookie export from the caller's logged-in browser."""
    try:
        return await service.upload_session(
            current_user["user_id"],
            request.cookies,
            user_agent=request.user_agent,
            platform=request.platform,
        )
    except BaseApplicationException as e:
        raise to_http_exception(e)


@router.delete("/logout", response_model=ClearSessionResponse)
async def logout(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LinkedInAuthService = Depends(get_linkedin_auth_service)
):
    """Discard the caller's session; admins also discard the shared session."""
    is_admin = ADMIN_SCOPE in current_user.get("scopes", [])
    return await service.clear_cookies(current_user["user_id"], include_shared=is_admin)


@router.post("/login", response_model=InteractiveLoginResponse, response_model_exclude_none=True)
async def interactive_login(
    current_user: Dict[str, Any] = Depends(require_scopes(ADMIN_SCOPE)),
    service: LinkedInAuthService = Depends(get_linkedin_auth_service)
):
    """Open a browser on the server for a manual LinkedIn login."""
    result = await service.interactive_login()

    if not result["success"]:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result["error"]
        )

    return result
