import os
import logging
from typing import Any, Dict, List, Optional, Protocol
import httpx
from pydantic import BaseModel, Field
from dotenv import load_dotenv, find_dotenv
from research_assistant.errors import ConfigurationError, SafetyBlock, TransportFailure

# Load environment variables from .env file
load_dotenv(find_dotenv())


def _env_timeout() -> float:
    return float(os.getenv("RESEARCH_ASSISTANT_TIMEOUT", "60"))


class GatewayConfig(BaseModel):
    """
    Configuration for the relay that fronts the model backend.
    """
    proxy_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("RESEARCH_ASSISTANT_PROXY_URL"),
        description="URL of the server-side relay that holds the API key."
    )
    timeout: float = Field(default_factory=_env_timeout, description="Request timeout in seconds.")


class ModelGateway(Protocol):
    """Anything that can send a prompt to a model and return the raw response envelope."""

    async def invoke(
        self,
        prompt: str,
        model_id: str,
        *,
        grounding_enabled: bool = False,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        ...


def build_request_body(
    prompt: str,
    model_id: str,
    grounding_enabled: bool = False,
    response_schema: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Builds the JSON body the relay forwards to the model backend."""
    body: Dict[str, Any] = {"prompt": prompt, "model": model_id}
    config: Dict[str, Any] = {}
    if grounding_enabled:
        config["tools"] = [{"googleSearch": {}}]
    if response_schema is not None:
        config["generationConfig"] = {
            "responseMimeType": "application/json",
            "responseSchema": response_schema,
        }
    if config:
        body["config"] = config
    return body


def check_safety_block(envelope: Dict[str, Any]) -> None:
    """
    Raises SafetyBlock if the envelope says the backend refused to answer.

    Checks the prompt-level block reason first, then a first candidate that
    finished because of a safety stop.
    """
    feedback = envelope.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        raise SafetyBlock(str(feedback["blockReason"]), _blocked_categories(feedback.get("safetyRatings")))

    candidates = envelope.get("candidates")
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        candidate = candidates[0]
        if candidate.get("finishReason") == "SAFETY":
            raise SafetyBlock("SAFETY", _blocked_categories(candidate.get("safetyRatings")))


def _blocked_categories(ratings: Any) -> List[str]:
    if not isinstance(ratings, list):
        return []
    return [
        str(rating.get("category"))
        for rating in ratings
        if isinstance(rating, dict) and rating.get("blocked") and rating.get("category")
    ]


class ProxyGateway:
    """
    Model gateway that talks to the relay over HTTP.

    The relay keeps the credentials; this client only needs to know where it lives.
    """

    def __init__(self, config: Optional[GatewayConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initializes the gateway.

        Args:
            config (GatewayConfig, optional): The configuration object.
                                              If None, configuration is read from the environment.
            transport (httpx.AsyncBaseTransport, optional): Transport override, mainly for tests.

        Raises:
            ConfigurationError: If no relay URL is configured.
        """
        if config is None:
            config = GatewayConfig()
        if not config.proxy_url:
            raise ConfigurationError(
                "RESEARCH_ASSISTANT_PROXY_URL is not set. The assistant cannot reach the model relay without it."
            )

        self.config = config
        self.transport = transport

    async def invoke(
        self,
        prompt: str,
        model_id: str,
        *,
        grounding_enabled: bool = False,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Sends one prompt to the relay and returns the decoded response envelope.

        Raises:
            TransportFailure: On non-2xx status, network failure, or a non-JSON body.
            SafetyBlock: If the backend refused the prompt.
        """
        if not prompt or not prompt.strip():
            raise ValueError("prompt must be a non-empty string")

        body = build_request_body(prompt, model_id, grounding_enabled, response_schema)
        logging.info(f"Invoking model {model_id} (grounding={grounding_enabled}, schema={response_schema is not None})")

        async with httpx.AsyncClient(transport=self.transport, timeout=self.config.timeout) as client:
            try:
                response = await client.post(self.config.proxy_url, json=body)
            except httpx.RequestError as e:
                logging.error(f"Failed to reach model relay at {self.config.proxy_url}: {e}")
                raise TransportFailure(f"Proxy request failed: {e}") from e

        if not response.is_success:
            error_text = response.text
            logging.error(f"Model relay returned status {response.status_code}: {error_text}")
            raise TransportFailure(
                f"Proxy request failed (Status {response.status_code}): {error_text}",
                status_code=response.status_code,
                body=error_text,
            )

        try:
            envelope = response.json()
        except ValueError as e:
            raise TransportFailure(
                "Proxy returned a body that is not valid JSON.",
                status_code=response.status_code,
                body=response.text,
            ) from e
        if not isinstance(envelope, dict):
            raise TransportFailure(
                "Proxy returned an unexpected JSON body.",
                status_code=response.status_code,
                body=response.text,
            )

        check_safety_block(envelope)
        return envelope
