"""HTTP client for the external structuring (chat completion) service."""

from typing import Any, Optional

import httpx

from mcq_extractor.config import StructuringConfig
from mcq_extractor.exceptions import StructuringError
from mcq_extractor.logger import Timer, get_logger

logger = get_logger(__name__)

COMPLETIONS_PATH = "/chat/completions"


class StructuringClient:
    """Sends a prompt to an OpenAI-compatible completion endpoint.

    Every failure (missing credential, network error, timeout, non-2xx
    status, malformed payload) is logged and reported as ``None``; callers
    treat that as "no response" and move to their next fallback.
    """

    def __init__(
        self,
        config: Optional[StructuringConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or StructuringConfig()
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.config.api_key}",
                "Content-Type": "application/json",
            },
        )

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "stream": False,
        }

    def complete(self, prompt: str, identifier: str = "document") -> Optional[str]:
        """Return the completion text for ``prompt``, or None on any failure.

        Args:
            prompt: Instruction text
            identifier: Label of the unit being structured, for logs
        """
        if not self.config.api_key:
            logger.error(
                "Structuring service credential is not configured",
                extra_data={"unit": identifier},
            )
            return None

        logger.info(
            "Sending prompt to structuring service",
            extra_data={
                "unit": identifier,
                "model": self.config.model,
                "prompt_length": len(prompt),
            },
        )

        try:
            with Timer("structuring_call") as timer, self._client() as client:
                response = client.post(COMPLETIONS_PATH, json=self.build_payload(prompt))
                response.raise_for_status()
                content = self.extract_message_content(response.json())
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Structuring service returned an error status",
                extra_data={
                    "unit": identifier,
                    "status_code": exc.response.status_code,
                    "response_sample": exc.response.text[:300],
                },
            )
            return None
        except (httpx.HTTPError, StructuringError, ValueError) as exc:
            logger.error(
                "Structuring service call failed",
                extra_data={
                    "unit": identifier,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return None

        logger.info(
            "Structuring response received",
            extra_data={
                "unit": identifier,
                "response_length": len(content),
                "call_time_ms": timer.get_elapsed_ms(),
            },
        )
        return content

    @staticmethod
    def extract_message_content(data: Any) -> str:
        """Pull ``choices[0].message.content`` out of a completion payload.

        Raises:
            StructuringError: If the payload has no usable content
        """
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise StructuringError(f"Unexpected completion payload: {exc!r}") from exc
        if not isinstance(content, str) or not content.strip():
            raise StructuringError("Completion payload has empty content")
        return content
