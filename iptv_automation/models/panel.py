"""
Panel identity and authenticated session models
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PanelCredentials:
    """Base URL and admin login of one panel; used as the session cache key"""
    base_url: str
    username: str
    password: str = field(repr=False)

    def url(self, path: str = "") -> str:
        """Absolute URL for a panel path"""
        base = self.base_url.rstrip("/")
        if not path:
            return base
        return f"{base}/{path.lstrip('/')}"


@dataclass
class Session:
    """One authenticated interaction with the panel"""
    cookies: dict[str, str]
    token: str
    captured_at: float

    @property
    def cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.cookies.items())

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        """Whether the session is still inside its freshness window"""
        return (now - self.captured_at) < ttl_seconds
