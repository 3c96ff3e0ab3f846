"""
Browser Session Driver

Owns the headless Chrome lifecycle for a single scrape: launch with
deployment-appropriate flags, install a stored session and stealth shims,
navigate, and hand back a rendered snapshot of the page.
"""

import asyncio
import functools
import random
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.support.ui import WebDriverWait
from selenium.common.exceptions import TimeoutException, WebDriverException

from sales_tracker.core.config import Settings
from sales_tracker.core.exceptions import (
    InvalidUrlException,
    NavigationException,
    NavigationTimeoutException,
    SessionExpiredException,
    SessionRequiredException,
)
from sales_tracker.scrapers.base import RenderedPage
from sales_tracker.scrapers.session_store import SessionStore
from sales_tracker.scrapers.utils import detect_job_site
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Sites that only render postings for a logged-in session.
SESSION_GATED_SITES: Tuple[str, ...] = ("linkedin",)

BASE_BROWSER_ARGS: Tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--window-size=1920,1080",
)

# Memory-starved container hosts
MANAGED_BROWSER_ARGS: Tuple[str, ...] = (
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-software-rasterizer",
    "--disable-extensions",
    "--disable-background-networking",
    "--disable-sync",
    "--disable-translate",
    "--hide-scrollbars",
    "--metrics-recording-only",
    "--mute-audio",
    "--no-first-run",
    "--no-zygote",
    "--single-process",
    "--disable-notifications",
)

STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
window.chrome = { runtime: {} };
const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) => (
  parameters.name === 'notifications'
    ? Promise.resolve({ state: Notification.permission })
    : originalQuery(parameters)
);
"""

_SAME_SITE_VALUES = {
    "strict": "Strict",
    "lax": "Lax",
    "none": "None",
    "no_restriction": "None",
}


@dataclass(frozen=True)
class BrowserLaunchConfig:
    """Launch settings resolved once from the environment at startup."""

    headless: bool = True
    executable_path: Optional[str] = None
    driver_path: Optional[str] = None
    managed_environment: bool = False
    arguments: Tuple[str, ...] = BASE_BROWSER_ARGS
    window_size: Tuple[int, int] = (1920, 1080)
    navigation_timeout: int = 30

    @classmethod
    def from_settings(cls, settings: Settings) -> "BrowserLaunchConfig":
        managed = settings.RENDER or bool(settings.CHROME_EXECUTABLE_PATH)
        arguments = BASE_BROWSER_ARGS + (MANAGED_BROWSER_ARGS if managed else ())

        if managed:
            logger.info("Using configured Chrome", executable_path=settings.CHROME_EXECUTABLE_PATH)
        else:
            logger.info("Local development: using the system Chrome")

        return cls(
            headless=settings.SCRAPER_HEADLESS,
            executable_path=settings.CHROME_EXECUTABLE_PATH,
            driver_path=settings.CHROMEDRIVER_PATH,
            managed_environment=managed,
            arguments=arguments,
            navigation_timeout=settings.SCRAPER_NAVIGATION_TIMEOUT,
        )

    def visible(self) -> "BrowserLaunchConfig":
        """Copy for a headed browser a person can interact with."""
        return replace(self, headless=False)


def to_cdp_cookie(cookie: Dict[str, Any], default_url: str = "https://www.linkedin.com") -> Dict[str, Any]:
    """
    Normalize a cookie record to a CDP ``Network.CookieParam``.

    Accepts DevTools/Puppeteer exports (``expires``), Selenium
    (``expiry``) and browser-extension exports (``expirationDate``).
    """
    param: Dict[str, Any] = {
        "name": cookie["name"],
        "value": str(cookie.get("value", "")),
        "path": cookie.get("path") or "/",
    }

    if cookie.get("domain"):
        param["domain"] = cookie["domain"]
    else:
        param["url"] = default_url

    for flag in ("secure", "httpOnly"):
        if flag in cookie:
            param[flag] = bool(cookie[flag])

    same_site = _SAME_SITE_VALUES.get(str(cookie.get("sameSite", "")).lower())
    if same_site:
        param["sameSite"] = same_site

    expires = cookie.get("expires", cookie.get("expiry", cookie.get("expirationDate")))
    if expires is not None and not cookie.get("session"):
        try:
            expires = float(expires)
        except (TypeError, ValueError):
            expires = -1
        if expires > 0:
            param["expires"] = expires

    return param


class PageDriver(ABC):
    """
    Minimal page automation surface the pipeline depends on.

    One instance is one browser with one tab.
    """

    @abstractmethod
    async def goto(self, url: str, timeout: int) -> None:
        pass

    @abstractmethod
    async def evaluate(self, script: str) -> Any:
        pass

    @abstractmethod
    async def wait_for_function(self, script: str, timeout: int) -> None:
        pass

    @abstractmethod
    async def content(self) -> str:
        pass

    @abstractmethod
    async def current_url(self) -> str:
        pass

    @abstractmethod
    async def title(self) -> str:
        pass

    @abstractmethod
    async def cookies(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def set_cookies(self, cookies: List[Dict[str, Any]]) -> None:
        pass

    @abstractmethod
    async def set_user_agent(self, user_agent: str, platform: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def add_init_script(self, source: str) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


DriverFactory = Callable[[BrowserLaunchConfig], Awaitable[PageDriver]]
DelayFunction = Callable[[], Awaitable[None]]


class SeleniumPageDriver(PageDriver):
    """
    PageDriver backed by Selenium's Chrome WebDriver.

    WebDriver calls block, so each one runs in the default executor.
    Chrome DevTools commands cover what WebDriver has no API for.
    """

    def __init__(self, driver: webdriver.Chrome) -> None:
        self._driver = driver

    @classmethod
    async def launch(cls, config: BrowserLaunchConfig) -> "SeleniumPageDriver":
        options = Options()

        if config.headless:
            options.add_argument("--headless=new")
        for argument in config.arguments:
            options.add_argument(argument)
        if config.executable_path:
            options.binary_location = config.executable_path

        # Return once the DOM is built; slow trackers must not hold us up
        options.page_load_strategy = "eager"
        options.add_experimental_option("excludeSwitches", ["enable-automation"])
        options.add_experimental_option("useAutomationExtension", False)

        service = Service(executable_path=config.driver_path) if config.driver_path else Service()

        loop = asyncio.get_event_loop()
        driver = await loop.run_in_executor(
            None, lambda: webdriver.Chrome(options=options, service=service)
        )

        instance = cls(driver)
        try:
            await instance._run(driver.set_window_size, *config.window_size)
        except Exception:
            await instance.close()
            raise
        return instance

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def _cdp(self, command: str, params: Dict[str, Any]) -> Any:
        return await self._run(self._driver.execute_cdp_cmd, command, params)

    async def goto(self, url: str, timeout: int) -> None:
        await self._run(self._driver.set_page_load_timeout, timeout)
        try:
            await self._run(self._driver.get, url)
        except TimeoutException as e:
            raise NavigationTimeoutException("page navigation", timeout) from e
        except WebDriverException as e:
            reason = e.msg or str(e)
            if "ERR_NAME_NOT_RESOLVED" in reason:
                raise InvalidUrlException(url) from e
            raise NavigationException(url, reason) from e

    async def evaluate(self, script: str) -> Any:
        return await self._run(self._driver.execute_script, script)

    async def wait_for_function(self, script: str, timeout: int) -> None:
        wait = WebDriverWait(self._driver, timeout, poll_frequency=1)
        try:
            await self._run(wait.until, lambda d: d.execute_script(script))
        except TimeoutException as e:
            raise NavigationTimeoutException("waiting for page condition", timeout) from e

    async def content(self) -> str:
        return await self._run(lambda: self._driver.page_source)

    async def current_url(self) -> str:
        return await self._run(lambda: self._driver.current_url)

    async def title(self) -> str:
        return await self._run(lambda: self._driver.title)

    async def cookies(self) -> List[Dict[str, Any]]:
        result = await self._cdp("Network.getAllCookies", {})
        return result.get("cookies", [])

    async def set_cookies(self, cookies: List[Dict[str, Any]]) -> None:
        params = [to_cdp_cookie(cookie) for cookie in cookies if cookie.get("name")]
        await self._cdp("Network.setCookies", {"cookies": params})
        logger.info(f"Applied {len(params)} cookies to page")

    async def set_user_agent(self, user_agent: str, platform: Optional[str] = None) -> None:
        params: Dict[str, Any] = {"userAgent": user_agent}
        if platform:
            params["platform"] = platform
        await self._cdp("Network.setUserAgentOverride", params)

    async def add_init_script(self, source: str) -> None:
        await self._cdp("Page.addScriptToEvaluateOnNewDocument", {"source": source})

    async def close(self) -> None:
        await self._run(self._driver.quit)


async def human_delay(min_seconds: float = 2.0, max_seconds: float = 4.0) -> None:
    """Pause for a random human-like dwell time."""
    await asyncio.sleep(random.uniform(min_seconds, max_seconds))


async def close_quietly(driver: PageDriver) -> None:
    """Close a browser, logging instead of raising if that fails."""
    try:
        await driver.close()
    except Exception as e:
        logger.warning(f"Error closing browser: {e}")


def is_login_page(page: RenderedPage) -> bool:
    """Whether a gated site bounced us to its sign-in form."""
    url = page.url.lower()
    return (
        "/login" in url
        or "/uas/login" in url
        or page.has_element('input[name="session_key"]')
        or "sign in" in page.title.lower()
    )


@dataclass
class BrowserSessionDriver:
    """
    Produces rendered pages, authenticated when the site demands it.

    Every ``open_page`` call launches its own browser; nothing is pooled or
    shared between calls.
    """

    launch_config: BrowserLaunchConfig
    session_store: SessionStore
    driver_factory: DriverFactory = SeleniumPageDriver.launch
    delay: DelayFunction = field(default=human_delay)

    @asynccontextmanager
    async def open_page(
        self,
        url: str,
        owner_id: Optional[str] = None,
        site: Optional[str] = None
    ) -> AsyncIterator[RenderedPage]:
        """
        Launch a browser, load ``url`` and yield the rendered page.

        The browser is closed exactly once when the block exits, however it
        exits.

        Raises:
            SessionRequiredException: Gated site and no stored session
            SessionExpiredException: Gated site answered with a login page
            NavigationTimeoutException: Page did not load in time
        """
        site = site or detect_job_site(url)
        driver = await self.driver_factory(self.launch_config)
        try:
            yield await self._load(driver, url, owner_id, site)
        finally:
            await close_quietly(driver)

    async def _load(self, driver: PageDriver, url: str, owner_id: Optional[str], site: str) -> RenderedPage:
        gated = site in SESSION_GATED_SITES
        user_agent = DEFAULT_USER_AGENT
        platform = None

        if gated:
            session = await self.session_store.load(owner_id)
            if session is None:
                raise SessionRequiredException(site)

            # Must match the UA the cookies were issued to or the site forces a re-login
            if session.user_agent:
                user_agent = session.user_agent
                logger.info("Using saved User-Agent", user_agent=user_agent[:50])
            platform = session.platform

            await driver.set_cookies(session.cookies)
            logger.info(
                "Using stored session",
                site=site,
                owner_id=owner_id,
                cookie_count=len(session.cookies),
            )

        await driver.set_user_agent(user_agent, platform)
        await driver.add_init_script(STEALTH_SCRIPT)

        await driver.goto(url, timeout=self.launch_config.navigation_timeout)
        await self.delay()

        page = RenderedPage(
            url=await driver.current_url(),
            html=await driver.content(),
            title=await driver.title(),
        )

        if gated and is_login_page(page):
            raise SessionExpiredException(site=site)

        return page
