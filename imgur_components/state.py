from typing import Optional

import requests

from .types import USER_AGENT


class SessionFactory:
    def __init__(self):
        self.session: Optional[requests.Session] = None

    def get(self) -> requests.Session:
        if self.session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
            self.session = session
        return self.session

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None
