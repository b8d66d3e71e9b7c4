"""LandsMaps parcel lookups through the ZenRows proxy.

A lookup is three dependent requests, all sent to the proxy endpoint with the
target URL as a query parameter:

1. cookie bootstrap against the portal root; the proxy returns the portal's
   cookies in a ``Zr-Cookies`` header formatted ``name=value;name=value``
2. token exchange with those cookies, answered with
   ``{"result": [{"access_token": ...}]}``
3. parcel query ``{parcel_endpoint}/{province}/{district}/{parcel}`` with the
   bearer token

Every step reuses the same proxy ``session_id`` so the proxy keeps the same
exit node. Session state lives in a ``RegistrySession`` value that each step
returns, so one client instance can serve concurrent lookups.
"""

import random
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx

from app.core.base_http_client import BaseHTTPClient
from app.core.config import RegistrySettings
from app.core.exceptions import APIClientError, ConfigurationError, ParcelValidationError, RegistryLookupError
from app.models.title_deed_models import ParcelQuery, RegistryParcelRecord, RegistrySession
from app.utils.logging import get_logger
from app.utils.thai_numerals import normalize_thai_digits

LOGGER = get_logger(__name__)

COOKIE_HEADER = "Zr-Cookies"
MIN_PROVINCE_ID = 1
MAX_PROVINCE_ID = 96
INVALID_DATA_MESSAGE = "ข้อมูลไม่ถูกต้อง กรุณาตรวจสอบข้อมูล"


def _parse_int(value: Union[int, str, None]) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = normalize_thai_digits(str(value)) if value is not None else ""
    try:
        return int(text)
    except ValueError:
        return None


def validate_parcel_query(
    province_code: Union[int, str],
    district_code: Union[int, str],
    parcel_number: Union[int, str],
) -> ParcelQuery:
    """Check and normalize a parcel query without touching the network.

    Raises:
        ParcelValidationError: Naming the first invalid field
    """
    province_id = _parse_int(province_code)
    if province_id is None or not MIN_PROVINCE_ID <= province_id <= MAX_PROVINCE_ID:
        raise ParcelValidationError(
            "province_code",
            f"Province ID must be between {MIN_PROVINCE_ID}-{MAX_PROVINCE_ID}, got {province_code!r}",
        )

    district = normalize_thai_digits(str(district_code)) if district_code is not None else ""
    if not district:
        raise ParcelValidationError("district_code", "District ID is required")

    parcel_id = _parse_int(parcel_number)
    if parcel_id is None or parcel_id <= 0:
        raise ParcelValidationError(
            "parcel_number",
            f"Parcel ID must be a positive number, got {parcel_number!r}",
        )

    return ParcelQuery(province_id=province_id, district_id=district.rjust(2, "0"), parcel_id=parcel_id)


def parse_zr_cookies(header_value: Optional[str]) -> Dict[str, str]:
    """Parse the proxy's ``name=value;name=value`` cookie header.

    Pairs without a name or a value are skipped.
    """
    cookies: Dict[str, str] = {}
    if not header_value:
        return cookies
    for pair in header_value.split(";"):
        name, _, value = pair.strip().partition("=")
        if name and value:
            cookies[name] = value
    return cookies


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        text = response.text
        if "Incapsula" in text:
            raise RegistryLookupError("Request blocked by Incapsula protection")
        raise RegistryLookupError(f"Failed to parse registry response as JSON: {text[:200]}")


class LandsMapsClient(BaseHTTPClient):
    """Client for the land department's parcel lookup."""

    def __init__(
        self,
        settings: RegistrySettings,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        session_id_factory: Optional[Callable[[], int]] = None,
    ):
        super().__init__(
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            sleep=sleep,
        )
        self.settings = settings
        self._http_client = http_client
        self._session_id_factory = session_id_factory or (
            lambda: random.randrange(max(1, settings.session_id_range))
        )

    def _final_error(self, message: str, error: Exception) -> APIClientError:
        return RegistryLookupError(message, original_error=error)

    def _proxy_params(self, target_url: str, session_id: int) -> Dict[str, Any]:
        return {
            "url": target_url,
            "apikey": self.settings.zenrows_api_key,
            "session_id": session_id,
            **self.settings.proxy_options,
        }

    async def fetch_parcel_record(
        self,
        province_code: Union[int, str],
        district_code: Union[int, str],
        parcel_number: Union[int, str],
    ) -> RegistryParcelRecord:
        """Run the full bootstrap, token, query exchange for one parcel.

        Args:
            province_code: Province code, 1-96
            district_code: District code, left-padded to two characters
            parcel_number: Positive parcel (deed) number

        Returns:
            RegistryParcelRecord: The registry payload, unmodified

        Raises:
            ParcelValidationError: Before any request, for malformed input
            ConfigurationError: If no proxy API key is configured
            RegistryLookupError: If any step fails after retries
        """
        query = validate_parcel_query(province_code, district_code, parcel_number)
        if not self.settings.zenrows_api_key:
            raise ConfigurationError("ZENROWS_API_KEY is not configured")

        LOGGER.info(
            "Starting registry lookup",
            extra={"province": query.province_id, "district": query.district_id, "parcel": query.parcel_id},
        )

        if self._http_client is not None:
            record = await self._lookup(self._http_client, query)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                record = await self._lookup(client, query)

        LOGGER.info("Registry lookup finished", extra={"parcel": query.parcel_id})
        return record

    async def _lookup(self, client: httpx.AsyncClient, query: ParcelQuery) -> RegistryParcelRecord:
        session = await self.bootstrap_session(client)
        session = await self.exchange_token(client, session)
        return await self.query_parcel(client, session, query)

    async def bootstrap_session(self, client: httpx.AsyncClient) -> RegistrySession:
        """Step 1: open a proxy session and collect the portal cookies."""

        async def attempt() -> RegistrySession:
            session_id = self._session_id_factory()
            response = await client.get(
                self.settings.zenrows_api_url,
                params=self._proxy_params(self.settings.base_url, session_id),
            )
            response.raise_for_status()

            cookies = parse_zr_cookies(response.headers.get(COOKIE_HEADER))
            if not cookies:
                raise RegistryLookupError("No cookies found in response")

            LOGGER.info("Registry session bootstrapped", extra={"cookies": len(cookies), "session_id": session_id})
            return RegistrySession(session_id=session_id, cookies=cookies)

        return await self.with_retries("cookie bootstrap", attempt)

    async def exchange_token(self, client: httpx.AsyncClient, session: RegistrySession) -> RegistrySession:
        """Step 2: trade the session cookies for an access token."""
        if not session.cookies:
            raise RegistryLookupError("No cookies available for token exchange")

        jwt_url = f"{self.settings.base_url}{self.settings.jwt_endpoint}"

        async def attempt() -> RegistrySession:
            response = await client.get(
                self.settings.zenrows_api_url,
                headers={
                    "Cookie": session.cookie_header,
                    "Accept": "application/json",
                    "User-Agent": self.settings.user_agent,
                },
                params=self._proxy_params(jwt_url, session.session_id),
            )
            response.raise_for_status()

            data = _json_body(response)
            if not isinstance(data, dict):
                raise RegistryLookupError("Unexpected token response")
            if data.get("error"):
                raise RegistryLookupError(f"JWT API returned error: {data.get('message')}")

            results = data.get("result") or []
            token = results[0].get("access_token") if results and isinstance(results[0], dict) else None
            if not token:
                raise RegistryLookupError("No access token found in JWT response")

            LOGGER.info("Registry access token obtained", extra={"session_id": session.session_id})
            return replace(session, access_token=token)

        return await self.with_retries("token exchange", attempt)

    async def query_parcel(
        self,
        client: httpx.AsyncClient,
        session: RegistrySession,
        query: ParcelQuery,
    ) -> RegistryParcelRecord:
        """Step 3: fetch the parcel record with the session's token."""
        if not session.access_token:
            raise RegistryLookupError("No access token available for parcel query")

        parcel_url = (
            f"{self.settings.base_url}{self.settings.parcel_endpoint}"
            f"/{query.province_id}/{query.district_id}/{query.parcel_id}"
        )

        async def attempt() -> RegistryParcelRecord:
            response = await client.get(
                self.settings.zenrows_api_url,
                headers={
                    "Authorization": f"Bearer {session.access_token}",
                    "Accept": "application/json",
                    "User-Agent": self.settings.user_agent,
                },
                params=self._proxy_params(parcel_url, session.session_id),
            )
            response.raise_for_status()

            data = _json_body(response)
            if not isinstance(data, dict):
                raise RegistryLookupError("Unexpected parcel response")
            if data.get("error"):
                raise RegistryLookupError(f"Parcel API returned error: {data.get('message')}")
            if not data.get("result"):
                raise RegistryLookupError(INVALID_DATA_MESSAGE)
            return data

        return await self.with_retries("parcel query", attempt)
