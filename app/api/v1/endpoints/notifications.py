"""Operations channel notification endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.dependencies import get_line_notifier
from app.models.request.notification import LoanApplicationNotifyRequest
from app.models.response.response import NotificationResponse
from app.services.notification.line_notifier import LineNotifier, LoanNotification
from app.services.property_info import extract_property_info
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


def build_notification(request: LoanApplicationNotifyRequest) -> LoanNotification:
    """Fill the card's blank deed fields from the resolved deed data."""
    info = extract_property_info(request.registry_record, request.manual_data, request.analysis)
    data = LoanNotification.model_validate(
        request.model_dump(include=set(LoanNotification.model_fields))
    )
    return data.model_copy(
        update={
            "owner_name": data.owner_name or info.owner_name,
            "property_location": data.property_location or info.property_location,
            "property_area": data.property_area or info.property_area,
            "parcel_no": data.parcel_no or info.land_number,
        }
    )


@router.post(
    "/loan-application",
    response_model=NotificationResponse,
    summary="Notify operations of a new loan application",
    description="Push failures are reported in the body; the request itself does not fail.",
    operation_id="notify_loan_application",
)
async def notify_loan_application(
    request: LoanApplicationNotifyRequest,
    notifier: Annotated[LineNotifier, Depends(get_line_notifier)],
) -> NotificationResponse:
    notification = build_notification(request)
    LOGGER.info(
        "Sending loan application notification",
        extra={"loan_application_id": notification.loan_application_id},
    )
    result = await notifier.send_loan_application(notification)
    return NotificationResponse(success=result["success"], error=result.get("error"))
