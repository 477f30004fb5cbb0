from __future__ import annotations

from abc import ABC, abstractmethod


class NetworkClient(ABC):
    """Abstract transport for the MediaWiki action API.

    Implementations do as little as possible beyond the network protocol:
    they force ``format=json``, raise ``TransportError`` on a non-200 status
    and hand back the raw body. Decoding is left to the client so it can be
    tested against canned responses.
    """

    @abstractmethod
    def get(self, args: dict[str, str]) -> bytes:
        """Issue a GET request with ``args`` as query parameters."""
        pass

    @abstractmethod
    def post(self, args: dict[str, str]) -> bytes:
        """Issue a POST request with ``args`` as form data."""
        pass
