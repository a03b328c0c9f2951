import logging
from dataclasses import dataclass
from typing import Optional
import httpx
from app.config import settings
from app.core.circuit_breaker import openai_circuit_breaker, CircuitBreaker, CircuitBreakerOpenException
from app.core.exceptions import ExternalAPIException
from app.core.expiration import detect_provider
from app.core.logging_utils import sanitize_log_message

logger = logging.getLogger(__name__)


@dataclass
class KeyValidationResult:
    """Outcome of checking a secret against its provider."""
    is_valid: Optional[bool]  # None when the provider cannot be checked
    message: str
    provider: Optional[str] = None


class ProviderAPIClient:
    """Client checking stored secrets against provider APIs, guarded by a circuit breaker."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        self.base_url = (base_url or settings.OPENAI_API_URL).rstrip("/")
        self.timeout = timeout or settings.PROVIDER_API_TIMEOUT
        self.circuit_breaker = circuit_breaker or openai_circuit_breaker

    async def _get_models(self, key_value: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(
                f"{self.base_url}/models",
                headers={
                    "Authorization": f"Bearer {key_value}",
                    "Content-Type": "application/json",
                },
            )

    async def validate_openai_key(self, key_value: str, request_id: Optional[str] = None) -> KeyValidationResult:
        """
        Check an OpenAI secret by listing models with it.

        Returns:
            KeyValidationResult: valid on 2xx, invalid on 401

        Raises:
            ExternalAPIException: On transport errors or unexpected status codes
            CircuitBreakerOpenException: If the provider circuit is open
        """
        try:
            response = await self.circuit_breaker.call(self._get_models, key_value)
        except CircuitBreakerOpenException:
            logger.warning(
                sanitize_log_message("Circuit breaker open for OpenAI API", RequestID=request_id)
            )
            raise
        except httpx.TimeoutException as e:
            logger.warning(
                sanitize_log_message("OpenAI API timeout", Timeout=self.timeout, Error=str(e), RequestID=request_id)
            )
            raise ExternalAPIException(detail="OpenAI API timeout")
        except httpx.RequestError as e:
            logger.error(
                sanitize_log_message("OpenAI API request error", Error=str(e), RequestID=request_id),
                exc_info=True
            )
            raise ExternalAPIException(detail=f"OpenAI API request error: {str(e)}")

        logger.info(
            sanitize_log_message(
                "OpenAI key validation response",
                StatusCode=response.status_code,
                RequestID=request_id
            )
        )

        if response.status_code == 401:
            return KeyValidationResult(False, "Invalid or expired OpenAI key", "openai")
        if response.is_success:
            return KeyValidationResult(True, "Valid OpenAI key", "openai")

        raise ExternalAPIException(
            detail=f"OpenAI API error: {response.status_code}"
        )

    async def validate_key(self, key_value: str, request_id: Optional[str] = None) -> KeyValidationResult:
        """Validate a secret with its provider when the provider is known and checks are enabled."""
        provider = detect_provider(key_value)
        if provider != "openai":
            return KeyValidationResult(None, "No provider validation available for this key", provider)
        if not settings.PROVIDER_VALIDATION_ENABLED:
            return KeyValidationResult(None, "Provider validation is disabled", provider)
        return await self.validate_openai_key(key_value, request_id=request_id)
