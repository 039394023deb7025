"""
Base API Client with connection pooling, cancellation and staged errors.
All API clients (prices.runescape.wiki, etc.) inherit from this.

Every failure is raised as an APIError subclass that names the stage it came
from (build, send, status, read, decode), so callers can tell transient
network trouble apart from schema drift. Nothing is retried or cached here.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Dict, Any, Tuple, Union
from urllib.parse import urlencode
import json
import logging
import threading

import requests
from requests.adapters import HTTPAdapter

from osrs_prices.core.constants import (
    API_TIMEOUT_DEFAULT,
    BODY_CHUNK_SIZE,
    DEFAULT_USER_AGENT,
    POOL_CONNECTIONS,
    POOL_MAXSIZE,
)
from osrs_prices.core.request_context import RequestContext

# Get logger - configuration should be done by application entrypoint, not library modules
logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for every error raised by an API client."""

    stage = "unknown"


class ValidationError(APIError, ValueError):
    """An argument was rejected before any request was built."""

    stage = "validate"


class InvalidIntervalError(ValidationError):
    """Interval is not accepted by the operation it was passed to."""


class RequestBuildError(APIError):
    """The HTTP request could not be constructed (bad URL or parameters)."""

    stage = "build"


class TransportError(APIError):
    """DNS, connection, TLS or other network-layer failure."""

    stage = "send"


class RequestTimeout(TransportError):
    """The transport gave up waiting on the server."""


class RequestCancelled(TransportError):
    """The caller cancelled the RequestContext before the call finished."""


class DeadlineExceeded(RequestCancelled):
    """The RequestContext deadline passed before the call finished."""


class UnexpectedStatusError(APIError):
    """Server answered with anything other than HTTP 200."""

    stage = "status"

    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"unexpected status code: {status_code}")


class BodyReadError(APIError):
    """The response stream failed while the body was being read."""

    stage = "read"


class DecodeError(APIError, ValueError):
    """Response body is not valid JSON or does not have the expected shape."""

    stage = "decode"


TimeoutType = Union[int, float, Tuple[int, int], Tuple[float, float]]


def _discard_response(future: Future) -> None:
    """Close the response of a send nobody is waiting on any more."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


class BaseAPIClient:
    """
    Base class for JSON-over-HTTP API clients.
    Provides a pooled session, the identifying User-Agent header, context
    aware sending and the shared status/read/decode pipeline.
    """

    # Connection pool settings
    POOL_CONNECTIONS = POOL_CONNECTIONS  # Number of connection pools to cache
    POOL_MAXSIZE = POOL_MAXSIZE          # Max connections per pool

    def __init__(
            self,
            base_url: str,
            user_agent: Optional[str] = None,
            timeout: TimeoutType = API_TIMEOUT_DEFAULT,
            session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: Base URL for the API
            user_agent: User-Agent header sent with every request
            timeout: Request timeout in seconds, or (connect, read)
            session: Pre-built session (tests inject fakes here)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout: TimeoutType = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT

        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'application/json'
        })

        # Pool connections; a failed attempt is reported, never retried
        adapter = HTTPAdapter(
            pool_connections=self.POOL_CONNECTIONS,
            pool_maxsize=self.POOL_MAXSIZE,
            max_retries=0,
        )
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

        logger.info(f"Initialized {self.__class__.__name__} - Base: {self.base_url}, Pool: {self.POOL_MAXSIZE}")

    def _build_url(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> str:
        """Join base URL, endpoint and query string. Commas stay literal."""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        if params:
            url = f"{url}?{urlencode(params, safe=',')}"
        return url

    def _effective_timeout(self, ctx: Optional[RequestContext]) -> TimeoutType:
        """Clamp the transport timeout to whatever the context has left."""
        if ctx is None:
            return self.timeout
        remaining = ctx.remaining()
        if remaining is None:
            return self.timeout
        # urllib3 rejects a zero timeout
        if remaining <= 0:
            raise DeadlineExceeded("request deadline exceeded")
        if isinstance(self.timeout, tuple):
            return tuple(min(t, remaining) for t in self.timeout)  # type: ignore[return-value]
        return min(self.timeout, remaining)

    @staticmethod
    def _context_error(ctx: RequestContext) -> RequestCancelled:
        if ctx.cancelled:
            return RequestCancelled("request cancelled")
        return DeadlineExceeded("request deadline exceeded")

    @classmethod
    def _raise_if_done(cls, ctx: RequestContext) -> None:
        if ctx.done:
            raise cls._context_error(ctx)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.POOL_MAXSIZE,
                    thread_name_prefix=self.__class__.__name__,
                )
            return self._executor

    @staticmethod
    def _wait_for(future: Future, ctx: RequestContext) -> bool:
        """Block until the future finishes or the context ends. True if it finished."""
        finished = threading.Event()
        future.add_done_callback(lambda _f: finished.set())
        unregister = ctx.on_cancel(finished.set)
        try:
            finished.wait(ctx.remaining())
        finally:
            unregister()
        return future.done() and not ctx.cancelled

    def _send(self, prepared: requests.PreparedRequest, timeout: TimeoutType) -> requests.Response:
        try:
            return self.session.send(prepared, stream=True, timeout=timeout)
        except requests.Timeout as e:
            raise RequestTimeout(f"sending request: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"sending request: {e}") from e

    def _send_with_context(
            self,
            prepared: requests.PreparedRequest,
            timeout: TimeoutType,
            ctx: RequestContext,
    ) -> requests.Response:
        """
        Send on a worker thread and wait until it finishes or the context ends.

        An abandoned send keeps running in the background; its response is
        closed as soon as it arrives.
        """
        future = self._get_executor().submit(self._send, prepared, timeout)

        if not self._wait_for(future, ctx):
            future.add_done_callback(_discard_response)
            raise self._context_error(ctx)

        # Transport timeout clamped to the deadline counts as the deadline
        exc = future.exception()
        if isinstance(exc, RequestTimeout) and ctx.expired:
            raise DeadlineExceeded("request deadline exceeded") from exc
        return future.result()

    def _read_body(self, response: requests.Response, ctx: Optional[RequestContext]) -> bytes:
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=BODY_CHUNK_SIZE):
                if ctx is not None:
                    self._raise_if_done(ctx)
                chunks.append(chunk)
        except requests.RequestException as e:
            raise BodyReadError(f"reading response body: {e}") from e
        finally:
            response.close()
        return b"".join(chunks)

    def _read_body_with_context(self, response: requests.Response, ctx: RequestContext) -> bytes:
        """
        Read on a worker thread so a stalled body cannot outlive the context.

        An abandoned read stops at its next chunk or at the transport timeout,
        and closes the response either way.
        """
        future = self._get_executor().submit(self._read_body, response, ctx)

        if not self._wait_for(future, ctx):
            raise self._context_error(ctx)

        # A read cut short by the clamped timeout counts as the deadline
        exc = future.exception()
        if isinstance(exc, BodyReadError) and ctx.done:
            raise self._context_error(ctx) from exc
        return future.result()

    def _make_request(
            self,
            method: str,
            endpoint: str,
            params: Optional[Dict[str, str]] = None,
            ctx: Optional[RequestContext] = None,
    ) -> Any:
        """
        Make one HTTP request and decode its JSON body.

        Args:
            method: HTTP method (the prices API only needs GET)
            endpoint: API endpoint (will be appended to base_url)
            params: Query parameters, sent in insertion order
            ctx: Optional cancellation/deadline token

        Returns:
            Decoded JSON document

        Raises:
            RequestBuildError, TransportError, UnexpectedStatusError,
            BodyReadError, DecodeError
        """
        if ctx is not None:
            self._raise_if_done(ctx)

        url = self._build_url(endpoint, params)
        try:
            prepared = self.session.prepare_request(requests.Request(method, url))
        except (requests.RequestException, ValueError) as e:
            raise RequestBuildError(f"creating request: {e}") from e

        logger.debug(f"{method} {prepared.url}")

        timeout = self._effective_timeout(ctx)
        if ctx is None:
            response = self._send(prepared, timeout)
        else:
            response = self._send_with_context(prepared, timeout, ctx)

        if response.status_code != 200:
            response.close()
            raise UnexpectedStatusError(response.status_code, url=prepared.url or url)

        if ctx is None:
            body = self._read_body(response, None)
        else:
            body = self._read_body_with_context(response, ctx)

        try:
            json_data = json.loads(body)
        # Deeply nested documents exhaust the recursion limit in the decoder
        except (ValueError, RecursionError) as e:
            raise DecodeError(f"error unmarshaling response: {e}") from e

        logger.debug(f"Request successful: {method} {endpoint} ({len(body)} bytes)")
        return json_data

    def get(self, endpoint: str, params: Optional[Dict[str, str]] = None,
            ctx: Optional[RequestContext] = None) -> Any:
        """GET request wrapper"""
        return self._make_request('GET', endpoint, params=params, ctx=ctx)

    def close(self):
        """Clean up resources"""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None
        self.session.close()
        logger.info(f"Closed {self.__class__.__name__}")

    def __enter__(self):
        """Context manager entry - returns self for use in 'with' blocks."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures session is closed."""
        self.close()
        return False  # Don't suppress exceptions
