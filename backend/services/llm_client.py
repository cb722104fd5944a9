"""LLM Client for Groq API integration."""
import time
from dataclasses import dataclass
from typing import Optional, Dict, Any
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from config import GROQ_API_KEY, GENERATION_MODEL, LLM_TIMEOUT_SECONDS, MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)

# Checked in order; APITimeoutError is itself an APIError
_ERROR_CODES = (
    (RateLimitError, "RATE_LIMIT_ERROR", "Rate limit exceeded. Please try again in a few moments."),
    (AuthenticationError, "AUTHENTICATION_ERROR", "Authentication failed. Please check your API key."),
    (APITimeoutError, "TIMEOUT_ERROR", "Request timed out. Please try again."),
    (APIError, "API_ERROR", "Groq API error: {error}"),
)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for interfacing with Groq API for text generation."""

    def __init__(self, api_key: Optional[str] = None, timeout: float = LLM_TIMEOUT_SECONDS):
        """
        Initialize LLM client with Groq API key.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
            timeout: Seconds before a generation request is abandoned
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.timeout = timeout
        self.client = Groq(api_key=self.api_key, timeout=timeout)
        logger.info("LLMClient initialized successfully")

    def generate(
        self,
        prompt: str,
        model: str = GENERATION_MODEL,
        max_tokens: int = MAX_OUTPUT_TOKENS
    ) -> LLMResponse:
        """
        Generate response using Groq API.

        Args:
            prompt: Complete prompt with context and query
            model: Groq model name
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()

        try:
            logger.debug(f"Generating response with model: {model}")

            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": prompt
                    }
                ],
                max_tokens=max_tokens,
                temperature=0.2
            )
        except Exception as e:
            raise self._to_client_error(e, model, start_time) from e

        latency_ms = int((time.time() - start_time) * 1000)
        text = response.choices[0].message.content or ""
        tokens_input = response.usage.prompt_tokens
        tokens_output = response.usage.completion_tokens

        logger.info(
            f"Generated response: model={model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=text,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=model
        )

    @staticmethod
    def _to_client_error(exc: Exception, model: str, start_time: float) -> LLMClientError:
        """Translate a Groq SDK (or unexpected) exception into an LLMClientError."""
        latency_ms = int((time.time() - start_time) * 1000)
        details: Dict[str, Any] = {
            "model": model,
            "latency_ms": latency_ms,
            "original_error": str(exc)
        }

        for error_type, code, message in _ERROR_CODES:
            if isinstance(exc, error_type):
                break
        else:
            code = "UNKNOWN_ERROR"
            message = "Unexpected error during generation: {error}"
            details["error_type"] = type(exc).__name__

        if code == "RATE_LIMIT_ERROR":
            details["retry_after"] = 60  # Suggest retry after 60 seconds

        error = LLMError(code=code, message=message.format(error=exc), details=details)
        logger.error(
            f"LLM generation failed: code={code}, model={model}, latency={latency_ms}ms, error={exc}",
            exc_info=exc,
            extra={"error_code": error.code, "error_details": error.details}
        )
        return LLMClientError(error)
