"""
Session Store

Keeps the cookies, user agent and platform of a logged-in browser so gated
boards can be scraped later. Owners get a database row mirrored to a
per-owner JSON file; the shared session file in the cache directory
belongs to no owner.
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from sales_tracker.core.exceptions import DatabaseException, InvalidSessionDataException
from sales_tracker.models.scraper_session import ScraperSession
from sales_tracker.repositories.session_repository import SessionRepository
from sales_tracker.utils.logger import get_logger

logger = get_logger(__name__)

SESSION_FILE_NAME = "linkedin-session.json"
LEGACY_COOKIES_FILE_NAME = "linkedin-cookies.json"
OWNER_CACHE_DIR_NAME = "sessions"


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Session:
    """A reusable browsing identity."""

    cookies: List[Dict[str, Any]]
    user_agent: Optional[str] = None
    platform: Optional[str] = None
    saved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: Optional[datetime] = None
    owner_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["Session"]:
        """
        Build a session from a file payload.

        Accepts the full ``{cookies, userAgent, platform, savedAt}`` object
        and the older bare cookie array. Returns None when there are no
        cookies to use.
        """
        if isinstance(payload, list):
            payload = {"cookies": payload}
        if not isinstance(payload, dict):
            return None

        cookies = payload.get("cookies")
        if not isinstance(cookies, list) or not cookies:
            return None

        return cls(
            cookies=cookies,
            user_agent=payload.get("userAgent"),
            platform=payload.get("platform"),
            saved_at=_parse_timestamp(payload.get("savedAt")) or datetime.now(timezone.utc),
            expires_at=_parse_timestamp(payload.get("expiresAt")),
        )

    @classmethod
    def from_row(cls, row: ScraperSession) -> "Session":
        saved_at = row.updated_at or row.created_at or datetime.now(timezone.utc)
        if saved_at.tzinfo is None:
            saved_at = saved_at.replace(tzinfo=timezone.utc)
        return cls(
            cookies=list(row.cookies or []),
            user_agent=row.user_agent,
            platform=row.platform,
            saved_at=saved_at,
            expires_at=row.expires_at,
            owner_id=row.user_id,
        )

    def to_file_payload(self) -> Dict[str, Any]:
        payload = {
            "cookies": self.cookies,
            "userAgent": self.user_agent,
            "platform": self.platform,
            "savedAt": _format_timestamp(self.saved_at),
        }
        if self.expires_at:
            payload["expiresAt"] = _format_timestamp(self.expires_at)
        return payload

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return (now or datetime.now(timezone.utc)) >= expires_at


def validate_cookies(cookies: Any) -> List[Dict[str, Any]]:
    """
    Check an uploaded cookie list before it is stored.

    Raises:
        InvalidSessionDataException: Not a non-empty list of named cookie objects
    """
    if not isinstance(cookies, list) or not cookies:
        raise InvalidSessionDataException()

    for cookie in cookies:
        if not isinstance(cookie, dict) or not cookie.get("name"):
            raise InvalidSessionDataException("Every cookie needs a name")

    return cookies


class SessionStore:
    """
    Owner-scoped session persistence with a file cache fallback.

    ``save`` with an owner writes the database row and mirrors it to that
    owner's cache file under ``sessions/``; without an owner the shared
    session file and legacy cookies file are written. ``load`` tries the
    owner's live row, then the owner's cache file, and reaches the shared
    files only while no owner anywhere has a stored session.
    """

    def __init__(
        self,
        repository: Optional[SessionRepository] = None,
        cache_dir: Path = Path(".cache"),
        ttl_days: Optional[int] = 30
    ) -> None:
        self.repository = repository
        self.cache_dir = Path(cache_dir)
        self.ttl_days = ttl_days

    @property
    def session_file(self) -> Path:
        return self.cache_dir / SESSION_FILE_NAME

    @property
    def legacy_cookies_file(self) -> Path:
        return self.cache_dir / LEGACY_COOKIES_FILE_NAME

    @property
    def owner_cache_dir(self) -> Path:
        return self.cache_dir / OWNER_CACHE_DIR_NAME

    def owner_file(self, owner_id: str) -> Path:
        digest = hashlib.sha256(owner_id.encode("utf-8")).hexdigest()[:32]
        return self.owner_cache_dir / f"{digest}.json"

    def _expiry_from(self, saved_at: datetime) -> Optional[datetime]:
        if not self.ttl_days:
            return None
        return saved_at + timedelta(days=self.ttl_days)

    async def save(
        self,
        owner_id: Optional[str],
        cookies: List[Dict[str, Any]],
        user_agent: Optional[str] = None,
        platform: Optional[str] = None
    ) -> Session:
        """
        Store a session, replacing whatever the owner had before.

        Raises:
            InvalidSessionDataException: Empty or malformed cookie list
            DatabaseException: Owner row could not be written
        """
        cookies = validate_cookies(cookies)

        saved_at = datetime.now(timezone.utc)
        session = Session(
            cookies=cookies,
            user_agent=user_agent,
            platform=platform,
            saved_at=saved_at,
            expires_at=self._expiry_from(saved_at),
            owner_id=owner_id,
        )

        if not owner_id:
            self._write_shared_files(session)
            return session

        if self.repository is not None:
            row = await self.repository.upsert_for_owner(
                owner_id,
                cookies,
                user_agent=user_agent,
                platform=platform,
                expires_at=session.expires_at,
            )
            if row is None:
                raise DatabaseException(f"Could not store session for user {owner_id}")
            logger.info("Session saved to database", owner_id=owner_id, cookie_count=len(cookies))

            try:
                self._write_owner_file(owner_id, session)
            except OSError as e:
                logger.warning(f"Could not mirror session to file cache: {e}")
        else:
            self._write_owner_file(owner_id, session)

        return session

    async def load(self, owner_id: Optional[str] = None) -> Optional[Session]:
        """Get the live session for an owner, or the shared file session."""
        if not owner_id:
            return self._read_shared_files()

        if self.repository is not None:
            row = await self.repository.get_active_for_owner(owner_id)
            if row is not None and row.cookies:
                logger.info("Loaded session from database", owner_id=owner_id)
                return Session.from_row(row)

        cached = self._read_file(self.owner_file(owner_id))
        if cached is not None:
            if cached.is_expired():
                return None
            cached.owner_id = owner_id
            return cached

        if await self._owner_sessions_exist():
            return None

        return self._read_shared_files()

    def has_saved(self) -> bool:
        """Whether a usable shared session exists on disk."""
        return self._read_shared_files() is not None

    async def clear(self, owner_id: Optional[str] = None, include_shared: bool = False) -> Dict[str, Any]:
        """
        Remove a stored session.

        With an owner, only that owner's row and cache file go; the shared
        files are removed as well when ``include_shared`` is set. Without
        an owner the shared files are removed.

        Returns:
            Dict[str, Any]: ``{"success": True, "message": ...}``
        """
        removed = False

        if owner_id:
            if self.repository is not None:
                removed = await self.repository.delete_for_owner(owner_id)
            removed = self._unlink(self.owner_file(owner_id)) or removed

        if not owner_id or include_shared:
            for path in (self.session_file, self.legacy_cookies_file):
                removed = self._unlink(path) or removed

        if not removed:
            return {"success": True, "message": "No cookies to clear"}

        logger.info("Session cleared", owner_id=owner_id, include_shared=include_shared)
        return {"success": True, "message": "LinkedIn cookies cleared"}

    async def _owner_sessions_exist(self) -> bool:
        if self.owner_cache_dir.is_dir() and any(self.owner_cache_dir.glob("*.json")):
            return True
        if self.repository is None:
            return False

        count = await self.repository.count_for_site()
        # An unreachable database may still hold owner rows
        return count is None or count > 0

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False

    def _write_owner_file(self, owner_id: str, session: Session) -> None:
        path = self.owner_file(owner_id)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(session.to_file_payload(), f, indent=2)

    def _write_shared_files(self, session: Session) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        with open(self.session_file, "w", encoding="utf-8") as f:
            json.dump(session.to_file_payload(), f, indent=2)

        with open(self.legacy_cookies_file, "w", encoding="utf-8") as f:
            json.dump(session.cookies, f, indent=2)

    def _read_file(self, path: Path) -> Optional[Session]:
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable session file {path}: {e}")
            return None

        return Session.from_payload(payload)

    def _read_shared_files(self) -> Optional[Session]:
        for path in (self.session_file, self.legacy_cookies_file):
            session = self._read_file(path)
            if session is None:
                continue
            # The legacy mirror holds the same cookies, so stop here
            if session.is_expired():
                logger.info(f"Session file {path.name} has expired")
                return None

            return session

        return None
