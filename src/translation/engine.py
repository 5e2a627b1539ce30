"""Translation provider capability and its concrete variants.

The rest of the system only relies on ``batch_translate``: a key to text map
goes in, a key to translated text map comes out. Providers may omit keys
they could not translate and may fail as a whole.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import httpx

from config.settings import TRANSLATION_CONFIG


class TranslationError(RuntimeError):
    """Provider call failed or returned an unusable payload."""


class TranslationNotConfiguredError(TranslationError):
    """Translation was requested but no provider credential was configured."""


@runtime_checkable
class TranslationEngine(Protocol):
    enabled: bool

    async def batch_translate(
        self,
        texts: Mapping[str, str],
        source_locale: str,
        target_locale: str,
    ) -> Dict[str, str]:
        ...

    async def aclose(self) -> None:
        ...


class DisabledTranslationEngine:
    """Stand-in used when the process started without a credential."""

    enabled = False

    def __init__(self, reason: str = "Translation engine not initialized") -> None:
        self.reason = reason

    async def batch_translate(
        self,
        texts: Mapping[str, str],
        source_locale: str,
        target_locale: str,
    ) -> Dict[str, str]:
        raise TranslationNotConfiguredError(self.reason)

    async def aclose(self) -> None:
        return None


class LingoTranslationEngine:
    """HTTP client for the Lingo.dev localization endpoint."""

    enabled = True

    def __init__(
        self,
        api_key: str,
        *,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not api_key:
            raise TranslationNotConfiguredError("A provider API key is required")
        self.api_url = (api_url or TRANSLATION_CONFIG["api_url"]).rstrip("/")
        self.timeout = float(timeout or TRANSLATION_CONFIG["request_timeout_seconds"])
        self._api_key = api_key
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def batch_translate(
        self,
        texts: Mapping[str, str],
        source_locale: str,
        target_locale: str,
    ) -> Dict[str, str]:
        if not texts:
            return {}
        payload = {
            "params": {"workflowId": str(uuid.uuid4()), "fast": False},
            "locale": {"source": source_locale, "target": target_locale},
            "data": dict(texts),
        }
        try:
            response = await self._get_client().post(
                f"{self.api_url}/i18n",
                json=payload,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json; charset=utf-8",
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise TranslationError(f"Provider request failed: {exc}") from exc

        if not response.is_success:
            raise TranslationError(
                f"Provider returned HTTP {response.status_code}: {response.reason_phrase}"
            )
        return self._extract_translations(response)

    @staticmethod
    def _extract_translations(response: httpx.Response) -> Dict[str, str]:
        try:
            body: Any = response.json()
        except ValueError as exc:
            raise TranslationError("Provider returned a non-JSON body") from exc
        if not isinstance(body, Mapping):
            raise TranslationError("Provider response is not an object")
        if body.get("error"):
            raise TranslationError(f"Provider error: {body['error']}")
        data = body.get("data")
        if not isinstance(data, Mapping):
            raise TranslationError("Provider response has no data object")
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def create_translation_engine(
    api_key: Optional[str],
    *,
    api_url: Optional[str] = None,
    timeout: Optional[float] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> TranslationEngine:
    """Return the live engine when a credential is present, else the disabled variant."""

    if not api_key or not api_key.strip():
        return DisabledTranslationEngine(
            "Translation engine not initialized: no provider API key configured"
        )
    return LingoTranslationEngine(
        api_key.strip(), api_url=api_url, timeout=timeout, client=client
    )
