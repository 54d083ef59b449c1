"""
Create/renew request and result models
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import ConfigurationError
from .panel import PanelCredentials


class OutcomeKind(Enum):
    """Verdict of the post-submit page scan"""
    SUCCESS = "success"
    FAILURE = "failure"
    INCONCLUSIVE = "inconclusive"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    marker: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS


def _require(**values) -> None:
    missing = [name for name, value in values.items() if value is None or (isinstance(value, str) and not value.strip())]
    if missing:
        raise ConfigurationError(fields=missing)


def plan_label(plan_months: int) -> str:
    """Plan name as shown in panels and emails, e.g. '3 Month'"""
    return f"{plan_months} Month"


@dataclass
class CreateLineRequest:
    """Input for creating a new subscriber line"""
    customer_name: str
    panel: PanelCredentials
    plan_months: int = 1
    customer_email: Optional[str] = None

    def __post_init__(self):
        _require(
            customer_name=self.customer_name,
            panel_url=self.panel.base_url,
            panel_user=self.panel.username,
            panel_pass=self.panel.password,
        )
        if self.plan_months < 0:
            raise ConfigurationError("planMonths must not be negative", ["plan_months"])


@dataclass
class RenewLineRequest:
    """Input for extending an existing subscriber line"""
    username: str
    panel: PanelCredentials
    plan_months: int = 1

    def __post_init__(self):
        _require(
            iptv_username=self.username,
            panel_url=self.panel.base_url,
            panel_user=self.panel.username,
            panel_pass=self.panel.password,
        )
        if self.plan_months < 0:
            raise ConfigurationError("planMonths must not be negative", ["plan_months"])


@dataclass
class ProvisioningResult:
    """Output of a create or renew operation"""
    success: bool
    username: str
    plan_months: int
    success_indicators: bool = False
    password: Optional[str] = None
    email_sent: Optional[bool] = None
    error: Optional[str] = None
    alternate_username: Optional[str] = None
