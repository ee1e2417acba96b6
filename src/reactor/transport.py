"""HTTP client construction shared by the checker and the applier."""

import contextlib
from collections.abc import Iterator

import httpx

from reactor.config import ReactorConfig


def build_client(config: ReactorConfig) -> httpx.Client:
    """Create a blocking client with the configured timeout and user agent."""
    return httpx.Client(
        timeout=config.request_timeout,
        follow_redirects=True,
        headers={"User-Agent": config.user_agent},
    )


@contextlib.contextmanager
def client_session(client: httpx.Client | None, config: ReactorConfig) -> Iterator[httpx.Client]:
    """Yield ``client`` untouched, or a fresh client that is closed afterwards."""
    if client is not None:
        yield client
        return
    with build_client(config) as owned:
        yield owned
