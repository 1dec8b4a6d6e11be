# fusionsolar_exporter/models/session.py
from dataclasses import dataclass, field

import requests


# Read from this cookie on login, replayed as a request header afterwards.
XSRF_TOKEN = "XSRF-TOKEN"


@dataclass(frozen=True)
class Credentials:
    base_url: str
    username: str
    secret: str = field(repr=False)


@dataclass
class Session:
    """
    Authenticated handle for one collection cycle.

    `token` came from the XSRF-TOKEN cookie set by /login. Every later call
    must send it back as the XSRF-TOKEN *header*; the cookie alone is not
    accepted by the API.
    """

    base_url: str
    token: str = field(repr=False)
    http: requests.Session = field(repr=False)

    def auth_headers(self) -> dict[str, str]:
        return {XSRF_TOKEN: self.token}
