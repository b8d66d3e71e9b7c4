"""LINE push notifications for new loan applications."""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from app.core.config import NotificationSettings
from app.utils.logging import get_logger
from app.utils.url_utils import encode_image_url

LOGGER = get_logger(__name__)

COLORS = {
    "primary": "#FF5F5F",
    "background": "#333333",
    "secondary_bg": "#44536B",
    "text_white": "#FFFFFF",
    "text_light": "#D0D4E2",
    "text_muted": "#B0B6C5",
}

MAX_SUPPORTING_IMAGES = 2
BADGE_TEXT = "ยื่นสินเชื่อ [จากหน้าเว็บ]"


class LoanNotification(BaseModel):
    """Finalized application summary for the operations channel."""

    model_config = ConfigDict(populate_by_name=True)

    amount: str
    owner_name: str = Field(default="", alias="ownerName")
    property_location: str = Field(default="", alias="propertyLocation")
    property_area: str = Field(default="", alias="propertyArea")
    parcel_no: str = Field(default="", alias="parcelNo")
    amphur: str = ""
    province: str = ""
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    notes: Optional[str] = None
    title_deed_image_url: Optional[str] = Field(default=None, alias="titleDeedImageUrl")
    supporting_image_urls: List[str] = Field(default_factory=list, alias="supportingImageUrls")
    loan_application_id: Optional[str] = Field(default=None, alias="loanApplicationId")


def _image(url: str, **extra: Any) -> Dict[str, Any]:
    return {"type": "image", "url": url, "size": "full", "aspectMode": "cover", **extra}


def _text(text: str, size: str, color: str, **extra: Any) -> Dict[str, Any]:
    return {"type": "text", "text": text, "size": size, "color": color, **extra}


class LineNotifier:
    """Formats and pushes loan application cards to a LINE group."""

    def __init__(self, settings: NotificationSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client

    def _image_strip(self, data: LoanNotification) -> Dict[str, Any]:
        deed_url = encode_image_url(data.title_deed_image_url or "")
        supporting = [
            url
            for url in (encode_image_url(u) for u in data.supporting_image_urls[:MAX_SUPPORTING_IMAGES])
            if url.startswith("https://")
        ]

        contents: List[Dict[str, Any]] = []
        if deed_url.startswith("https://"):
            contents.append(_image(deed_url, aspectRatio="4:5", flex=2))
        if supporting:
            contents.append(
                {"type": "box", "layout": "vertical", "flex": 1, "contents": [_image(url) for url in supporting]}
            )
        return {"type": "box", "layout": "horizontal", "height": "160px", "contents": contents}

    def _footer(self, data: LoanNotification) -> Dict[str, Any]:
        detail_url = (
            f"{self.settings.admin_base_url}/loan/check/{data.loan_application_id}"
            if data.loan_application_id
            else self.settings.admin_base_url
        )
        buttons: List[Dict[str, Any]] = [
            {
                "type": "button",
                "style": "primary",
                "height": "sm",
                "action": {"type": "uri", "label": "ดูรายละเอียด", "uri": detail_url},
            }
        ]
        if data.latitude and data.longitude:
            buttons.append(
                {
                    "type": "button",
                    "style": "link",
                    "height": "sm",
                    "action": {
                        "type": "uri",
                        "label": "ดู Maps",
                        "uri": f"https://www.google.com/maps?q={data.latitude},{data.longitude}",
                    },
                }
            )
        return {"type": "box", "layout": "vertical", "spacing": "sm", "contents": buttons}

    def build_flex_message(self, data: LoanNotification) -> Dict[str, Any]:
        """Build the Flex bubble for one application."""
        location_text = " | ".join(
            part for part in (data.owner_name, data.property_location, data.property_area) if part
        )
        parcel_text = " • ".join(
            part
            for part in (
                f"เลขโฉนด {data.parcel_no}" if data.parcel_no else "",
                f"อ.{data.amphur}" if data.amphur else "",
                f"จ.{data.province}" if data.province else "",
            )
            if part
        )

        content: List[Dict[str, Any]] = [
            {
                "type": "box",
                "layout": "horizontal",
                "contents": [
                    {
                        "type": "box",
                        "layout": "horizontal",
                        "backgroundColor": COLORS["primary"],
                        "paddingAll": "4px",
                        "contents": [
                            _text(BADGE_TEXT, "xs", COLORS["text_white"], weight="bold", align="center")
                        ],
                    }
                ],
            },
            _text(data.amount, "lg", COLORS["text_white"], weight="bold", margin="sm"),
        ]
        if location_text:
            content.append(_text(location_text, "sm", COLORS["text_light"], wrap=True))
        if parcel_text:
            content.append(_text(parcel_text, "xs", COLORS["text_muted"], margin="xs", wrap=True))
        if data.notes:
            content.append(
                {
                    "type": "box",
                    "layout": "vertical",
                    "backgroundColor": COLORS["secondary_bg"],
                    "paddingAll": "10px",
                    "margin": "md",
                    "contents": [_text(data.notes, "xs", COLORS["text_white"], wrap=True)],
                }
            )

        return {
            "type": "bubble",
            "body": {
                "type": "box",
                "layout": "vertical",
                "paddingAll": "0px",
                "contents": [
                    self._image_strip(data),
                    {
                        "type": "box",
                        "layout": "vertical",
                        "backgroundColor": COLORS["background"],
                        "paddingAll": "16px",
                        "spacing": "sm",
                        "contents": content,
                    },
                ],
            },
            "footer": self._footer(data),
        }

    async def send_loan_application(self, data: LoanNotification) -> Dict[str, Any]:
        """Push the application card to the configured group.

        Returns:
            Dict with ``success`` and, on failure, ``error``. Never raises.
        """
        if not self.settings.channel_access_token or not self.settings.group_id:
            LOGGER.warning("LINE notification skipped, channel is not configured")
            return {"success": False, "error": "LINE channel is not configured"}

        payload = {
            "to": self.settings.group_id,
            "messages": [
                {
                    "type": "flex",
                    "altText": f"คำขอสินเชื่อใหม่ {data.amount} บาท",
                    "contents": self.build_flex_message(data),
                }
            ],
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.channel_access_token}",
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.settings.api_url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=30) as client:
                    response = await client.post(self.settings.api_url, json=payload, headers=headers)
        except Exception as e:
            LOGGER.error("Error sending LINE message", exc_info=True, extra={"error": str(e)})
            return {"success": False, "error": str(e)}

        if response.status_code >= 400:
            LOGGER.error(
                "Failed to send LINE message",
                extra={"status_code": response.status_code, "error_body": response.text[:500]},
            )
            return {"success": False, "error": f"LINE API error: {response.status_code} {response.text}"}

        LOGGER.info("LINE message sent", extra={"loan_application_id": data.loan_application_id})
        return {"success": True}
