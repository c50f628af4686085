import httpx

from hubuum_client.core.exceptions import InvalidSchemeError, UrlNotBaseError, UrlParseError

ALLOWED_SCHEMES = ("http", "https")


class BaseUrl:
    """
    A validated server root.

    Only http and https are accepted, the URL must have a host, and the path
    always ends with exactly one ``/`` so endpoint paths can be appended.
    """

    __slots__ = ("_url",)

    def __init__(self, url: httpx.URL):
        self._url = url

    @classmethod
    def parse(cls, value: str) -> "BaseUrl":
        try:
            url = httpx.URL(value)
        except (httpx.InvalidURL, TypeError) as exc:
            raise UrlParseError(str(exc)) from exc

        if not url.scheme:
            raise UrlParseError(f"relative URL without a base: {value}")
        if url.scheme not in ALLOWED_SCHEMES:
            raise InvalidSchemeError(url.scheme)
        if not url.host:
            raise UrlNotBaseError(value)
        if url.query or url.fragment:
            raise UrlNotBaseError(value)

        path = url.path.rstrip("/") + "/"
        return cls(url.copy_with(path=path))

    @property
    def url(self) -> httpx.URL:
        return self._url

    def as_str(self) -> str:
        return str(self._url)

    def join(self, path: str) -> str:
        return f"{self.as_str()}{path.lstrip('/')}"

    def __str__(self) -> str:
        return self.as_str()

    def __repr__(self) -> str:
        return f"BaseUrl({self.as_str()!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, BaseUrl):
            return self.as_str() == other.as_str()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.as_str())
