from __future__ import annotations

from care_messaging.application.dto.principal import Principal
from care_messaging.application.exceptions import ForbiddenError


def assert_onboarded(principal: Principal) -> None:
    """Only principals with a doctor/patient role may send messages."""
    if not principal.is_onboarded:
        raise ForbiddenError("Complete onboarding before sending messages")
