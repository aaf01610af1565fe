"""
Shared JSON-over-HTTP plumbing for the provider adapters.
Rate limiting plus exponential-backoff retries around a requests.Session.
"""

import time
import logging
import requests
from threading import Lock
from typing import Dict, Any, Optional


logger = logging.getLogger(__name__)


USER_AGENT = 'solana-token-tracker/0.1'


class ApiError(Exception):
    """Raised when a provider request fails after every retry."""
    pass


class RateLimiter:
    """
    Minimum-interval limiter: blocks until `interval` seconds have passed
    since the previous call.
    """
    def __init__(self, interval: float) -> None:
        self.interval = interval
        self.lock = Lock()
        self.last_call = 0.0

    def acquire(self) -> None:
        """Block until a new call is allowed."""
        with self.lock:
            wait = self.interval - (time.monotonic() - self.last_call)
            if wait > 0:
                time.sleep(wait)
            self.last_call = time.monotonic()


class JsonApiClient:
    """Thin HTTP client with rate limiting and exponential-backoff retries."""

    provider_name = 'API'
    error_class = ApiError

    def __init__(
        self,
        base_url: str,
        max_retries: int = 3,
        timeout: int = 30,
        rate_limit_s: float = 1.0,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip('/')
        self.max_retries = max_retries
        self.timeout = timeout

        self.rate_limiter = RateLimiter(rate_limit_s)
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT, 'Accept': 'application/json'})

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET a JSON document, retrying with 1s, 2s, 4s... backoff.

        Raises:
            ApiError: (the client's error_class) If every attempt fails
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        last_error = None

        for attempt in range(self.max_retries + 1):
            try:
                self.rate_limiter.acquire()
                response = self.session.get(url, params=params, timeout=self.timeout)
                response.raise_for_status()
                return response.json()
            except (requests.exceptions.RequestException, ValueError) as e:
                last_error = e
                logger.error(f"{self.provider_name} request failed for {url}: {e}")

                if attempt < self.max_retries:
                    wait = 2 ** attempt
                    logger.info(f"Retrying in {wait}s (attempt {attempt + 1}/{self.max_retries})")
                    time.sleep(wait)

        raise self.error_class(f"Failed to get {url} after {self.max_retries + 1} attempts: {last_error}")
