"""
Scanner Adapter

Owns the camera for one staff member's scanning sessions. The decoding itself
happens in the browser; this adapter tracks who holds the camera, accepts the
decoded text once per session and guarantees the camera is released on every
exit path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Protocol
from uuid import uuid4

from disciplinetracker.core.errors import CameraError

logger = logging.getLogger(__name__)


class ScannerState(StrEnum):
    """Scanner lifecycle states."""

    IDLE = "idle"
    SCANNING = "scanning"


class CameraDevice(Protocol):
    """A camera that can be exclusively acquired and released."""

    @property
    def is_active(self) -> bool: ...

    def acquire(self) -> None:
        """Open the device. Raises CameraError if it cannot be opened."""
        ...

    def release(self) -> None:
        """Close the device. Must be safe to call when already closed."""
        ...


class BrowserCamera:
    """The camera of the staff member's browser.

    Acquiring it makes the dashboard mount the QR reader; releasing it makes
    the page tear the reader down and stop the video stream.
    """

    def __init__(self) -> None:
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def acquire(self) -> None:
        self._active = True

    def release(self) -> None:
        self._active = False


@dataclass(frozen=True)
class ScanSession:
    """Handle for one scanning session, returned by start()."""

    id: str = field(default_factory=lambda: uuid4().hex)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ScannerAdapter:
    """Single-session scanner over one camera device."""

    def __init__(self, camera: CameraDevice | None = None):
        self.camera: CameraDevice = camera or BrowserCamera()
        self._session: ScanSession | None = None

    @property
    def state(self) -> ScannerState:
        return ScannerState.SCANNING if self._session is not None else ScannerState.IDLE

    @property
    def active_session(self) -> ScanSession | None:
        return self._session

    def start(self) -> ScanSession:
        """Begin scanning, or return the session already in progress.

        Raises:
            CameraError: If the camera cannot be acquired; the adapter stays idle
        """
        if self._session is not None:
            return self._session

        try:
            self.camera.acquire()
        except CameraError:
            logger.warning("Camera acquisition failed", exc_info=True)
            raise
        except OSError as e:
            logger.warning(f"Camera acquisition failed: {e}")
            raise CameraError(str(e)) from e

        self._session = ScanSession()
        logger.debug(f"Scan session {self._session.id} started")
        return self._session

    def deliver(self, session: ScanSession | str, decoded_text: str) -> str | None:
        """Accept decoded text for the active session.

        Returns the text once and ends the session. Deliveries for a session
        that is no longer active (duplicate frames, stale pages) return None.
        """
        if not self._is_current(session):
            logger.debug("Ignoring decode for inactive scan session")
            return None

        self._end("decoded")
        return decoded_text

    def cancel(self, session: ScanSession | str) -> bool:
        """End the session at the user's request. Returns False if not active."""
        if not self._is_current(session):
            return False
        self._end("cancelled")
        return True

    def fail(self, session: ScanSession | str, reason: str = "") -> CameraError:
        """End the session after a camera error and return the error to surface.

        The adapter returns to idle and can be started again.
        """
        if self._is_current(session):
            self._end("camera error")
        logger.warning(f"Camera error during scan: {reason or 'unknown'}")
        return CameraError(reason or CameraError.user_message)

    def close(self) -> None:
        """Release the camera whatever the state (component removal)."""
        if self._session is not None:
            self._end("closed")
        else:
            self.camera.release()

    def _is_current(self, session: ScanSession | str) -> bool:
        if self._session is None:
            return False
        session_id = session if isinstance(session, str) else session.id
        return session_id == self._session.id

    def _end(self, how: str) -> None:
        session = self._session
        try:
            self.camera.release()
        finally:
            self._session = None
        if session is not None:
            logger.debug(f"Scan session {session.id} ended ({how})")
