# ==============================================================================
# Session Tracker - Session State, Lifecycle and Page Dwell
# ==============================================================================
"""
Owner of the single current session and the currently open page.

This module contains:
- Lazy, idempotent session creation with device and traffic attribution
- The Active/Idle state machine (transitions are driven by the activity
  monitor, the state lives here)
- Page dwell time: every page's dwell is reported exactly once, attributed
  to the page being left
- Unload-time delivery through a beacon

Detectors read the session through this tracker but never mutate it
directly.
"""

import logging
import secrets
import string
from collections.abc import Callable
from typing import TYPE_CHECKING

from clicksignals.base.scheduler import Scheduler
from clicksignals.base.session_store import SessionStore
from clicksignals.core.classifiers import (
    attribute_traffic,
    classify_user_agent,
    extract_utm,
    page_path,
)
from clicksignals.core.models import HostEnvironment, PageVisit, Session, SessionStatus
from clicksignals.core.signals import PageView, SessionUpdate
from clicksignals.utils.config import SessionSettings

if TYPE_CHECKING:
    from clicksignals.base.sink import Beacon

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_session_id(now_ms: int) -> str:
    """Time-based session id with a random base36 suffix."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(13))
    return f"session_{now_ms}_{suffix}"


class SessionTracker:
    """
    Session state and page lifecycle for one engine instance.

    Exactly one session is current at a time. It is created on the first
    page view or trackable interaction and is never deleted here; the idle
    timeout only flags it inactive.
    """

    def __init__(
        self,
        emit: Callable[[object], None],
        scheduler: Scheduler,
        environment: HostEnvironment,
        store: SessionStore | None = None,
        settings: SessionSettings | None = None,
    ):
        """
        Initialize the session tracker.

        Args:
            emit: Callable receiving every produced signal
            scheduler: Clock source
            environment: Host environment strings (mutated on navigation)
            store: Optional short-lived storage for the session id
            settings: Session settings (defaults from environment)
        """
        self._emit = emit
        self._scheduler = scheduler
        self.environment = environment
        self._store = store
        self.settings = settings or SessionSettings()

        self._session: Session | None = None
        self._visit: PageVisit | None = None
        self._start_listeners: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def session_id(self) -> str | None:
        return self._session.session_id if self._session else None

    @property
    def status(self) -> SessionStatus:
        if self._session is None:
            return SessionStatus.UNINITIALIZED
        return self._session.status

    @property
    def current_visit(self) -> PageVisit | None:
        return self._visit

    @property
    def page(self) -> str:
        """Path of the open page, falling back to the current URL's path."""
        if self._visit is not None:
            return self._visit.page
        return page_path(self.environment.url)

    def on_session_start(self, listener: Callable[[], None]) -> None:
        """Register a callback run once whenever a new session is created."""
        self._start_listeners.append(listener)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def ensure_session(self, user_id: str | None = None) -> str:
        """
        Return the current session id, creating the session if absent.

        Creation records start time, classifies the user agent and the
        referrer, persists the id and emits a SessionUpdate with
        pageViews=0. Calling again returns the same id and emits nothing.

        Args:
            user_id: Explicit user id, if the host knows one

        Returns:
            Session id
        """
        if self._session is not None:
            return self._session.session_id

        now = self._scheduler.now_ms()
        session_id = generate_session_id(now)
        attribution = attribute_traffic(self.environment.referrer, self.environment.url)
        self._session = Session(
            session_id=session_id,
            user_id=user_id,
            started_at=now,
            last_activity=now,
            referrer=self.environment.referrer,
            referrer_source=attribution.source,
            referrer_term=attribution.search_term,
            user_agent=self.environment.user_agent,
            device=classify_user_agent(self.environment.user_agent),
        )
        self._persist(session_id)
        logger.debug("Started session %s (source=%s)", session_id, attribution.source)

        self._emit(
            SessionUpdate(
                session_id=session_id,
                page=self.page,
                timestamp=now,
                is_active=True,
                user_id=user_id,
                started_at=now,
                page_views=0,
                pages=[],
                referrer=self._session.referrer,
                referrer_source=self._session.referrer_source,
                referrer_term=self._session.referrer_term,
                user_agent=self._session.user_agent,
                device=self._session.device,
            )
        )
        for listener in self._start_listeners:
            listener()
        return session_id

    def session_id_for_event(self) -> str:
        """
        Session id to attach to an event signal.

        Adopts an id persisted by an earlier page of the same tab without
        re-announcing the session; otherwise creates a new session.
        """
        if self._session is not None:
            return self._session.session_id

        stored = self._load_persisted()
        if stored:
            now = self._scheduler.now_ms()
            self._session = Session(
                session_id=stored,
                started_at=now,
                last_activity=now,
                referrer=self.environment.referrer,
                user_agent=self.environment.user_agent,
                device=classify_user_agent(self.environment.user_agent),
            )
            logger.debug("Adopted persisted session %s", stored)
            for listener in self._start_listeners:
                listener()
            return stored

        return self.ensure_session()

    def touch(self, now: int) -> bool:
        """
        Record qualifying activity.

        Returns:
            True if this activity moved the session from Idle back to Active
        """
        if self._session is None:
            return False
        resumed = not self._session.is_active
        self._session.last_activity = now
        self._session.is_active = True
        return resumed

    def activity_update(self, now: int) -> SessionUpdate | None:
        """SessionUpdate for a throttled activity tick, carrying identity fields."""
        if self._session is None:
            return None
        return SessionUpdate(
            session_id=self._session.session_id,
            page=self.page,
            timestamp=now,
            is_active=self._session.is_active,
            user_id=self._session.user_id,
            user_agent=self._session.user_agent,
            device=self._session.device,
        )

    def mark_idle(self) -> None:
        """Active -> Idle transition, fired by the idle timer."""
        if self._session is None or not self._session.is_active:
            return
        now = self._scheduler.now_ms()
        self._session.is_active = False
        logger.debug("Session %s idle", self._session.session_id)
        self._emit(
            SessionUpdate(
                session_id=self._session.session_id,
                page=self.page,
                timestamp=now,
                is_active=False,
                user_id=self._session.user_id,
                user_agent=self._session.user_agent,
                device=self._session.device,
            )
        )

    # ------------------------------------------------------------------
    # Page lifecycle
    # ------------------------------------------------------------------

    def record_page_view(self, page: str, title: str = "", user_id: str | None = None) -> None:
        """
        Close the open page (if any) and open a new one.

        Emits, in order: the finalized PageView of the previous page, a
        navigation SessionUpdate, and an immediate zero-duration PageView
        for the new page.

        Args:
            page: Path of the page being entered
            title: Title of the page being entered
            user_id: Explicit user id, if known
        """
        session_id = self.ensure_session(user_id)
        now = self._scheduler.now_ms()
        user_id = user_id or self._session.user_id

        closed = self.close_page(now, user_id=user_id)
        if closed is not None:
            self._emit(closed)

        self._visit = PageVisit(
            session_id=session_id,
            page=page,
            title=title,
            started_at=now,
            referrer=self.environment.referrer,
            utm=extract_utm(self.environment.url),
        )
        self._session.pages.append(page)
        self._session.last_activity = now
        self._session.is_active = True

        self._emit(
            SessionUpdate(
                session_id=session_id,
                page=page,
                timestamp=now,
                is_active=True,
                user_id=user_id,
                page_views=1,
                pages=[page],
            )
        )
        self._emit(self._page_view(self._visit, user_id))

    def close_page(self, now: int, user_id: str | None = None) -> PageView | None:
        """
        Finalize the open page's dwell time.

        The visit is closed at most once; a second call returns None.

        Returns:
            The finalized PageView, or None if no page is open
        """
        visit = self._visit
        if visit is None or visit.dwell_seconds is not None:
            return None
        visit.close(now)
        if user_id is None and self._session is not None:
            user_id = self._session.user_id
        return self._page_view(visit, user_id)

    def handle_unload(self, beacon: "Beacon | None" = None) -> None:
        """
        Close the open page at unload and deliver it best-effort.

        Uses the beacon when available, otherwise falls back to the regular
        asynchronous emission path. Never raises and never blocks.
        """
        try:
            closed = self.close_page(self._scheduler.now_ms())
            if closed is None:
                return
            if beacon is not None:
                if not beacon.send("pageview", closed.to_payload()):
                    logger.debug("Beacon rejected unload page view for %s", closed.page)
                return
            self._emit(closed)
        except Exception:
            logger.debug("Unload delivery failed", exc_info=True)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _page_view(self, visit: PageVisit, user_id: str | None) -> PageView:
        return PageView(
            session_id=visit.session_id,
            page=visit.page,
            timestamp=visit.started_at,
            title=visit.title,
            started_at=visit.started_at,
            dwell_seconds=visit.dwell_seconds,
            referrer=visit.referrer,
            utm=visit.utm,
            user_id=user_id,
        )

    def _persist(self, session_id: str) -> None:
        if self._store is None:
            return
        try:
            self._store.set(
                self.settings.storage_key, session_id, self.settings.storage_ttl_seconds
            )
        except Exception:
            logger.warning("Failed to persist session id %s", session_id, exc_info=True)

    def _load_persisted(self) -> str | None:
        if self._store is None:
            return None
        try:
            return self._store.get(self.settings.storage_key)
        except Exception:
            logger.warning("Failed to read persisted session id", exc_info=True)
            return None
