"""
Google Gemini client using the public generateContent REST API.
"""
import json
import logging
import time
from typing import Any, Optional, Sequence

import httpx

from ..constants import (
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    GEMINI_API_VERSION,
    GEMINI_BASE_URL,
)
from ..errors import ApiError, DecodingError, TransportError, UnknownLLMError
from ..tools.shell import SHELL_TOOL_DECLARATION
from .base import LLMClient
from .types import (
    LLMResponse,
    TextResponse,
    ToolCallRequest,
    ToolCallResponse,
    Turn,
    TurnRole,
)

logger = logging.getLogger(__name__)


class GeminiClient(LLMClient):
    """
    Gemini client for one conversation turn per request.

    Every request carries the full history, the new user prompt and the
    function declarations of the available tools.
    """

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        function_declarations: Optional[list[dict]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            api_key: Gemini API key
            model: Model name (defaults to gemini-2.5-flash)
            base_url: API host
            timeout: Request timeout in seconds
            function_declarations: Tool declarations to advertise
                (defaults to execute_shell_command)
            http_client: Client to send requests with; one is created and
                owned by this object when omitted
        """
        self._api_key = api_key
        self._model = model or DEFAULT_MODEL
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        if function_declarations is None:
            function_declarations = [SHELL_TOOL_DECLARATION]
        self._function_declarations = function_declarations
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def model(self) -> str:
        """Current model."""
        return self._model

    @model.setter
    def model(self, value: str) -> None:
        """Set current model."""
        self._model = value

    @property
    def endpoint(self) -> str:
        """Full URL of the generateContent method for the current model."""
        return f"{self._base_url}/{GEMINI_API_VERSION}/models/{self._model}:generateContent"

    def _build_headers(self) -> dict[str, str]:
        """Build request headers with authentication."""
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }

    def build_request_body(self, prompt: str, history: Sequence[Turn]) -> dict:
        """
        Build the JSON body for one request.

        Args:
            prompt: Text of the new user turn
            history: Preceding turns

        Returns:
            Request body with contents and tools
        """
        contents = self._convert_turns(history)
        contents.append({"role": "user", "parts": [{"text": prompt}]})

        body: dict[str, Any] = {"contents": contents}
        if self._function_declarations:
            body["tools"] = [{"functionDeclarations": list(self._function_declarations)}]
        return body

    def _convert_turns(self, turns: Sequence[Turn]) -> list[dict]:
        """Convert history turns to Gemini contents."""
        contents = []

        for turn in turns:
            if turn.role is TurnRole.TOOL_RESULT:
                payload = turn.tool_result
                if payload.is_error:
                    response = {"error": payload.error}
                else:
                    response = {"result": payload.result}
                contents.append({
                    "role": "function",
                    "parts": [{
                        "functionResponse": {
                            "name": payload.name,
                            "response": response,
                        }
                    }],
                })
            else:
                contents.append({
                    "role": turn.role.value,
                    "parts": [{"text": turn.text}],
                })

        return contents

    async def generate(self, prompt: str, history: Sequence[Turn]) -> LLMResponse:
        """Send one generateContent request and parse the reply."""
        body = self.build_request_body(prompt, history)
        start_time = time.perf_counter()

        try:
            response = await self._client.post(
                self.endpoint,
                headers=self._build_headers(),
                json=body,
                timeout=self._timeout,
            )
        except httpx.TransportError as e:
            detail = str(e) or type(e).__name__
            raise TransportError(detail) from e
        except httpx.HTTPError as e:
            detail = str(e) or type(e).__name__
            raise UnknownLLMError(detail) from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Gemini %s answered %s in %.0f ms",
            self._model, response.status_code, latency_ms,
        )

        if response.status_code != 200:
            raise ApiError(response.status_code, response.text or "Unknown API Error")

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodingError(f"Response is not valid JSON: {e}") from e

        parsed = self.parse_response(data)
        logger.debug("Gemini response kind: %s", type(parsed).__name__)
        return parsed

    @staticmethod
    def parse_response(data: Any) -> LLMResponse:
        """
        Read the first content part of the first candidate.

        Args:
            data: Decoded JSON response body

        Returns:
            TextResponse when the part carries text, ToolCallResponse when it
            carries a function call

        Raises:
            DecodingError: For any other shape
        """
        try:
            part = data["candidates"][0]["content"]["parts"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise DecodingError(f"No content part in response ({type(e).__name__}: {e})") from e

        if not isinstance(part, dict):
            raise DecodingError("Content part is not an object")

        text = part.get("text")
        if isinstance(text, str):
            return TextResponse(text=text)

        function_call = part.get("functionCall")
        if isinstance(function_call, dict):
            name = function_call.get("name")
            args = function_call.get("args", {})
            if isinstance(name, str) and isinstance(args, dict):
                return ToolCallResponse(call=ToolCallRequest(name=name, arguments=args))
            raise DecodingError("Malformed functionCall: expected a name and an args object")

        raise DecodingError("Content part has neither text nor functionCall")

    async def aclose(self) -> None:
        """Close the HTTP client if this object created it."""
        if self._owns_client:
            await self._client.aclose()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self._model})"
