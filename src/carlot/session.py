"""Session bookkeeping: the active dealer and the presence (auto-login) flag."""

from __future__ import annotations

from .logger import get_logger
from .models import CarDealer
from .store import SessionDocument, SessionStore

logger = get_logger(__name__)


class SessionManager:
    """Reads and writes the single session record."""

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    def log_in(self, dealer: CarDealer, presence: bool = False) -> SessionDocument:
        """Make dealer the active one, unless a presence session is already pinned.

        With presence enabled the stored session wins and is returned untouched,
        whatever dealer or flag is passed in.
        """
        session = self.store.load()
        if session.presence:
            return session
        session = SessionDocument(dealer_id=dealer.id, presence=presence)
        self.store.save(session)
        logger.info("Dealer %s logged in (presence=%s)", dealer.id, presence)
        return session

    def log_out(self) -> None:
        """Clear the session record."""
        self.store.save(SessionDocument())
        logger.info("Session cleared")

    def set_presence(self, presence: bool) -> None:
        """Flip only the presence flag of the stored session."""
        session = self.store.load()
        session.presence = presence
        self.store.save(session)
        logger.info("Presence set to %s", presence)

    def get_active_session(self) -> SessionDocument | None:
        """Return the stored session when a dealer is set."""
        session = self.store.load()
        if session.dealer_id is None:
            return None
        return session
