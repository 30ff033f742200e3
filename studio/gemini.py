"""
Gemini REST integration.

- Reasoning / image edit: `models/{model}:generateContent`
- Video generation (Veo): `models/{model}:predictLongRunning`, then
  `GET /{operation name}` until the operation reports `done`
- Result download: authenticated GET on the returned video URI

The client returns the decoded JSON; shaping it into pipeline types is the
pipeline's job.
"""

import logging
from typing import Optional

import httpx

from . import config
from .credentials import CredentialGate
from .errors import CredentialError, GeminiAPIError, is_credential_failure

logger = logging.getLogger(__name__)


def _error_details(resp: httpx.Response) -> tuple[str, str]:
    """Pull (status, message) out of a Google API error body."""
    try:
        err = resp.json().get("error") or {}
    except ValueError:
        return "", resp.text[:500]
    return err.get("status", ""), err.get("message") or resp.text[:500]


def raise_for_api_error(resp: httpx.Response, credential_check: bool = True) -> None:
    """
    Raise for a non-200 response. With `credential_check`, "entity not found"
    failures become CredentialError; operation polls pass False, since a
    missing operation is not a key problem.
    """
    if resp.status_code == 200:
        return
    status, message = _error_details(resp)
    text = f"Gemini API error {resp.status_code}: {message}"
    if credential_check and is_credential_failure(resp.status_code, status, message):
        raise CredentialError(text, status_code=resp.status_code, status=status)
    raise GeminiAPIError(text, status_code=resp.status_code, status=status)


class GeminiClient:
    """
    Thin async client over the Gemini REST API.

    The key is read from the credential gate on every call, so a key selected
    after construction is picked up by the next request.
    """

    def __init__(
        self,
        credentials: CredentialGate,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.api_base = (api_base or config.GEMINI_API_BASE).rstrip("/")
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT
        self._transport = transport

    def _auth_headers(self) -> dict:
        if not self.credentials.api_key:
            raise CredentialError("No API key selected")
        return {"x-goog-api-key": self.credentials.api_key}

    def _headers(self) -> dict:
        return {**self._auth_headers(), "Content-Type": "application/json"}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def generate_content(
        self,
        model: str,
        parts: list,
        system_instruction: Optional[str] = None,
        generation_config: Optional[dict] = None,
    ) -> dict:
        """Call generateContent with inline parts and an optional system role."""
        body: dict = {"contents": [{"parts": parts}]}
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            body["generationConfig"] = generation_config

        headers = self._headers()
        async with self._client() as client:
            resp = await client.post(
                f"{self.api_base}/models/{model}:generateContent",
                headers=headers,
                json=body,
            )
        raise_for_api_error(resp)
        return resp.json()

    async def submit_video_job(self, model: str, instance: dict, parameters: dict) -> dict:
        """Start a long-running Veo job. Returns the operation resource."""
        headers = self._headers()
        async with self._client() as client:
            resp = await client.post(
                f"{self.api_base}/models/{model}:predictLongRunning",
                headers=headers,
                json={"instances": [instance], "parameters": parameters},
            )
        raise_for_api_error(resp)
        operation = resp.json()
        logger.info(f"Veo job submitted: {operation.get('name')}")
        return operation

    async def get_operation(self, name: str) -> dict:
        """Refresh an operation's status. Idempotent."""
        headers = self._headers()
        async with self._client() as client:
            resp = await client.get(f"{self.api_base}/{name}", headers=headers)
        raise_for_api_error(resp, credential_check=False)
        return resp.json()

    async def download(self, uri: str) -> tuple[bytes, str]:
        """Fetch a result file. Returns (bytes, mime type)."""
        headers = self._auth_headers()
        async with self._client() as client:
            resp = await client.get(uri, headers=headers, follow_redirects=True)
            resp.raise_for_status()
        content_type = resp.headers.get("Content-Type", "video/mp4")
        return resp.content, content_type.split(";")[0]
