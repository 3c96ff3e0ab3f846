"""
LinkedIn Authentication Service

Captures and manages the LinkedIn session the scraper rides on. A session
arrives either from an interactive login in a visible browser window or
from a cookie export uploaded by the user.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sales_tracker.core.exceptions import BaseApplicationException
from sales_tracker.scrapers.browser import (
    BrowserLaunchConfig,
    DriverFactory,
    SeleniumPageDriver,
    close_quietly,
)
from sales_tracker.scrapers.session_store import SessionStore
from sales_tracker.utils.logger import get_logger, log_security_event

logger = get_logger(__name__)

LINKEDIN_LOGIN_URL = "https://www.linkedin.com/login"
LOGIN_PAGE_TIMEOUT = 60
LOGIN_SETTLE_SECONDS = 3

# Truthy once the browser has left the login form
LOGGED_IN_CHECK = "return !window.location.href.includes('/login');"


async def _settle() -> None:
    await asyncio.sleep(LOGIN_SETTLE_SECONDS)


class LinkedInAuthService:
    """Service for capturing, checking and discarding LinkedIn sessions."""

    def __init__(
        self,
        session_store: SessionStore,
        launch_config: BrowserLaunchConfig,
        driver_factory: DriverFactory = SeleniumPageDriver.launch,
        login_timeout: int = 300,
        settle: Callable[[], Awaitable[None]] = _settle
    ) -> None:
        self.session_store = session_store
        self.launch_config = launch_config
        self.driver_factory = driver_factory
        self.login_timeout = login_timeout
        self.settle = settle

    async def interactive_login(self) -> Dict[str, Any]:
        """
        Open a visible browser on the LinkedIn login page and wait for the
        person at the keyboard to sign in, then save the resulting session
        as the shared one.

        Returns:
            Dict[str, Any]: ``{success, message, cookieCount}`` or
            ``{success: False, error}``
        """
        driver = None
        try:
            logger.info("Launching browser for LinkedIn login")
            driver = await self.driver_factory(self.launch_config.visible())

            await driver.goto(LINKEDIN_LOGIN_URL, timeout=LOGIN_PAGE_TIMEOUT)
            logger.info(
                "Please log in to LinkedIn in the browser window",
                timeout_seconds=self.login_timeout,
            )

            await driver.wait_for_function(LOGGED_IN_CHECK, timeout=self.login_timeout)
            logger.info("Login detected, capturing session")
            await self.settle()

            cookies = await driver.cookies()
            user_agent = await driver.evaluate("return navigator.userAgent;")
            platform = await driver.evaluate("return navigator.platform;")

            await self.session_store.save(None, cookies, user_agent=user_agent, platform=platform)
            log_security_event("linkedin_interactive_login", success=True, cookie_count=len(cookies))

            return {
                "success": True,
                "message": "LinkedIn authentication successful! Cookies saved.",
                "cookieCount": len(cookies),
            }

        except Exception as e:
            error = e.user_message if isinstance(e, BaseApplicationException) else str(e)
            logger.error(f"LinkedIn login failed: {e}")
            log_security_event("linkedin_interactive_login", success=False, error=error)
            return {"success": False, "error": error}

        finally:
            if driver is not None:
                await close_quietly(driver)

    async def upload_session(
        self,
        owner_id: Optional[str],
        cookies: List[Dict[str, Any]],
        user_agent: Optional[str] = None,
        platform: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Store an uploaded cookie export for an owner.

        Raises:
            InvalidSessionDataException: Cookies are empty or malformed
            DatabaseException: The owner's row could not be written
        """
        session = await self.session_store.save(
            owner_id, cookies, user_agent=user_agent, platform=platform
        )
        log_security_event(
            "linkedin_session_upload",
            user_id=owner_id,
            cookie_count=len(session.cookies),
            has_user_agent=bool(user_agent),
        )
        return {
            "success": True,
            "message": "LinkedIn cookies uploaded successfully",
            "cookieCount": len(session.cookies),
        }

    async def status(self, owner_id: Optional[str] = None) -> Dict[str, Any]:
        session = await self.session_store.load(owner_id)
        if session is None:
            return {
                "authenticated": False,
                "message": "Not authenticated. Please upload your LinkedIn cookies.",
            }
        return {
            "authenticated": True,
            "message": "LinkedIn session active",
            "cookieCount": len(session.cookies),
            "savedAt": session.saved_at.isoformat(),
        }

    def has_saved_cookies(self) -> bool:
        return self.session_store.has_saved()

    async def clear_cookies(
        self,
        owner_id: Optional[str] = None,
        include_shared: bool = False
    ) -> Dict[str, Any]:
        result = await self.session_store.clear(owner_id, include_shared=include_shared)
        log_security_event("linkedin_session_cleared", user_id=owner_id, include_shared=include_shared)
        return result


async def get_linkedin_auth_service() -> LinkedInAuthService:
    """Get the application's LinkedIn auth service."""
    from sales_tracker.core.container import get_container, init_container

    await init_container()
    return get_container().get("linkedin_auth_service")


async def interactive_login() -> Dict[str, Any]:
    return await (await get_linkedin_auth_service()).interactive_login()


async def upload_session(
    owner_id: Optional[str],
    cookies: List[Dict[str, Any]],
    user_agent: Optional[str] = None,
    platform: Optional[str] = None
) -> Dict[str, Any]:
    service = await get_linkedin_auth_service()
    return await service.upload_session(owner_id, cookies, user_agent=user_agent, platform=platform)


async def has_saved_cookies() -> bool:
    return (await get_linkedin_auth_service()).has_saved_cookies()


async def clear_cookies(owner_id: Optional[str] = None) -> Dict[str, Any]:
    return await (await get_linkedin_auth_service()).clear_cookies(owner_id)
