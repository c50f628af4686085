import os
from typing import Any, Dict, Optional

from hubuum_client.core.exceptions import ConfigError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ClientConfig:
    """
    Transport configuration shared by the sync and async clients.

    Attributes:
        timeout: seconds handed to httpx; None disables the timeout
        verify: TLS certificate verification (bool or a CA bundle path)
        headers: extra headers sent with every request
        user_agent: overrides httpx's default User-Agent
    """

    timeout: Optional[float] = 30.0
    verify: Any = True
    headers: Dict[str, str] = {}
    user_agent: Optional[str] = None

    def __init__(self, **kwargs) -> None:
        self.headers = dict(self.headers)
        self.configure(**kwargs)

    def configure(self, **kwargs) -> None:
        for key, value in kwargs.items():
            if key.startswith("_") or not hasattr(self, key) or callable(getattr(self, key)):
                raise ConfigError(f"Invalid configuration key: {key}")
            setattr(self, key, value)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ClientConfig":
        """Build a config from HUBUUM_TIMEOUT, HUBUUM_VERIFY_TLS and HUBUUM_USER_AGENT."""
        environ = os.environ if environ is None else environ
        config = cls()

        timeout = environ.get("HUBUUM_TIMEOUT")
        if timeout is not None:
            try:
                config.timeout = float(timeout) if timeout.strip() else None
            except ValueError:
                raise ConfigError(f"HUBUUM_TIMEOUT must be a number, got {timeout!r}")

        verify = environ.get("HUBUUM_VERIFY_TLS")
        if verify is not None:
            lowered = verify.strip().lower()
            if lowered in _TRUE_VALUES:
                config.verify = True
            elif lowered in _FALSE_VALUES:
                config.verify = False
            else:
                raise ConfigError(
                    f"HUBUUM_VERIFY_TLS must be a boolean, got {verify!r}"
                )

        user_agent = environ.get("HUBUUM_USER_AGENT")
        if user_agent:
            config.user_agent = user_agent
        return config

    def client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for constructing an httpx.Client or httpx.AsyncClient."""
        headers = dict(self.headers)
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return {"timeout": self.timeout, "verify": self.verify, "headers": headers}

    def __repr__(self) -> str:
        return (
            f"ClientConfig(timeout={self.timeout!r}, verify={self.verify!r}, "
            f"user_agent={self.user_agent!r})"
        )
