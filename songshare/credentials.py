"""Spotify client-credentials token lifecycle."""

import logging
import threading
from typing import Callable, Optional

import requests

from . import __version__
from .errors import UpstreamError
from .models import Credential

logger = logging.getLogger(__name__)


class CredentialCell:
    """Thread-safe holder for the current credential.

    Readers get the stored immutable Credential; writers swap it whole.
    """

    def __init__(self, credential: Optional[Credential] = None):
        self._credential = credential
        self._lock = threading.Lock()

    def get(self) -> Optional[Credential]:
        with self._lock:
            return self._credential

    def set(self, credential: Credential) -> None:
        with self._lock:
            self._credential = credential


class CredentialManager:
    """Acquires catalog tokens and keeps them fresh in the background."""

    TOKEN_URL = "https://accounts.spotify.com/api/token"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        cell: Optional[CredentialCell] = None,
        timeout: float = 10,
        refresh_margin: float = 60,
        min_delay: float = 1,
        backoff_base: float = 1,
        backoff_max: float = 300,
        failure_threshold: int = 3,
        on_failure: Optional[Callable[[Exception, int], None]] = None,
    ):
        """Initialize credential manager.

        Args:
            client_id: Spotify client ID
            client_secret: Spotify client secret
            cell: Shared credential cell (created if omitted)
            timeout: HTTP timeout for token requests in seconds
            refresh_margin: Renew this many seconds before the token expires
            min_delay: Lower bound for the delay between renewals
            backoff_base: First retry delay after a failed renewal
            backoff_max: Upper bound for the retry delay
            failure_threshold: Consecutive failures before on_failure is called
            on_failure: Callback receiving (error, consecutive_failures)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.cell = cell or CredentialCell()
        self.timeout = timeout
        self.refresh_margin = refresh_margin
        self.min_delay = min_delay
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.failure_threshold = failure_threshold
        self.on_failure = on_failure

        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": f"songshare/{__version__}",
            }
        )

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def current_credential(self) -> Credential:
        """Return the current credential.

        A new one is acquired if there is none yet or the stored one has
        outlived its TTL (e.g. background renewal has been failing).
        """
        credential = self.cell.get()
        if credential is None or credential.is_expired():
            credential = self.refresh()
        return credential

    def refresh(self) -> Credential:
        """Acquire a new token and make it current.

        Concurrent calls are not coalesced; each one hits the token endpoint
        and the last to finish wins.

        Raises:
            UpstreamError: If the token request fails
        """
        credential = self._acquire()
        self.cell.set(credential)
        logger.debug("Catalog credential refreshed, expires in %ss", credential.expires_in)
        return credential

    def _acquire(self) -> Credential:
        """Request a token with the client-credentials grant."""
        try:
            response = self.session.post(
                self.TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise UpstreamError(f"Spotify token request failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"Spotify token response is not JSON: {e}") from e

        return Credential.from_token_response(data)

    def renewal_delay(self, credential: Credential) -> float:
        """Seconds to wait before renewing ``credential``."""
        return max(credential.expires_in - self.refresh_margin, self.min_delay)

    def retry_delay(self, failures: int) -> float:
        """Exponential backoff after ``failures`` consecutive failed renewals."""
        return min(self.backoff_base * 2 ** (failures - 1), self.backoff_max)

    def start(self) -> Credential:
        """Acquire the first credential and start background renewal.

        Raises:
            UpstreamError: If the first acquisition fails
        """
        if self._thread is not None and self._thread.is_alive() and not self._stop.is_set():
            return self.current_credential()

        credential = self.refresh()
        # Per-run event: a loop left running by stop() still sees its own flag
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._refresh_loop,
            args=(self._stop, self.renewal_delay(credential)),
            name="credential-refresh",
            daemon=True,
        )
        self._thread.start()
        logger.info("Credential refresh started (next renewal in %.0fs)", self.renewal_delay(credential))
        return credential

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop background renewal.

        Args:
            timeout: Seconds to wait for the loop to exit; defaults to just
                over the HTTP timeout so an in-flight refresh can finish
        """
        self._stop.set()
        if self._thread is None:
            return

        self._thread.join(timeout=self.timeout + 1 if timeout is None else timeout)
        if self._thread.is_alive():
            logger.warning("Credential refresh thread still running after stop")
        else:
            self._thread = None

    def _refresh_loop(self, stop: threading.Event, delay: float) -> None:
        """Background loop: renew before expiry, back off on failure."""
        failures = 0
        while not stop.wait(timeout=delay):
            try:
                credential = self.refresh()
            except UpstreamError as e:
                failures += 1
                delay = self.retry_delay(failures)
                if failures >= self.failure_threshold:
                    logger.error(
                        "Credential refresh failed %d times in a row: %s", failures, e
                    )
                    if self.on_failure is not None:
                        try:
                            self.on_failure(e, failures)
                        except Exception:
                            logger.exception("Credential failure callback raised")
                else:
                    logger.warning("Credential refresh failed, retrying in %.1fs: %s", delay, e)
                continue

            if failures:
                logger.info("Credential refresh recovered after %d failures", failures)
            failures = 0
            delay = self.renewal_delay(credential)
