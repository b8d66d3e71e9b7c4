"""Pydantic request models for operations notifications."""

from typing import Any, Dict, Optional

from pydantic import Field

from app.models.title_deed_models import RegistryParcelRecord
from app.services.notification.line_notifier import LoanNotification


class LoanApplicationNotifyRequest(LoanNotification):
    """A submitted application plus the deed data it was built from.

    Blank owner, location, area and parcel fields are filled from the deed
    data before the card is sent.
    """

    registry_record: Optional[RegistryParcelRecord] = Field(default=None, alias="registryRecord")
    manual_data: Optional[Dict[str, Any]] = Field(default=None, alias="manualData")
    analysis: Optional[Dict[str, Any]] = None
