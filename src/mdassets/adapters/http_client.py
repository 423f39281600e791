"""requests-backed HTTP capability."""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager

import requests
import urllib3

from ..config import FetchConfig
from ..core.ports import HttpClient, HttpResponse


class RequestsHttpClient(HttpClient):
    """One shared session carrying identification headers and TLS policy."""

    def __init__(self, config: FetchConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.user_agent,
            "Accept": config.accept,
            "Accept-Language": config.accept_language,
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        })
        self.session.verify = config.verify_tls
        if not config.verify_tls:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @contextmanager
    def get(self, url: str, headers: Mapping[str, str]) -> Iterator[HttpResponse]:
        resp = self.session.get(
            url,
            headers=dict(headers),
            timeout=self.config.timeout,
            stream=True,
        )
        try:
            yield resp
        finally:
            resp.close()

    def close(self) -> None:
        self.session.close()
