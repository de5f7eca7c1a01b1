"""Groq LLM client wrapper."""

import json
import time
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv
from groq import Groq
from groq import APIConnectionError, RateLimitError, InternalServerError

from src.config.settings import settings
from src.config.logging_config import get_logger
from src.domain.exceptions import CompletionError

load_dotenv()
logger = get_logger(__name__)


class GroqClient:
    """Wrapper for the Groq chat completion API."""

    def __init__(self, model: Optional[str] = None):
        """Initialize Groq client."""
        try:
            self.client = Groq(api_key=settings.groq_api_key)
            self.model = model or settings.groq_model
            logger.info(f"Groq client initialized with model: {self.model}")
        except Exception as e:
            logger.error(f"Failed to initialize Groq client: {str(e)}")
            raise

    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0,
        max_tokens: Optional[int] = None,
        max_retries: Optional[int] = None,
        sleep_seconds: int = 3,
        response_format: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Call Groq chat completion API.

        Transient errors (connection, rate limit, server) are retried up to
        `max_retries` attempts in total; the default of settings.llm_max_retries
        is a single attempt.

        Args:
            messages: List of message dictionaries with 'role' and 'content'
            temperature: Sampling temperature (0-1)
            max_tokens: Output length cap
            max_retries: Total attempts
            sleep_seconds: Seconds to wait between attempts
            response_format: Groq response format, e.g. {"type": "json_object"}

        Returns:
            Response content as string (empty if the model returned none)

        Raises:
            CompletionError: If every attempt fails
        """
        attempts = max(1, max_retries if max_retries is not None else settings.llm_max_retries)
        last_error = None

        params = {
            "model": self.model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if response_format:
            params["response_format"] = response_format

        for attempt in range(1, attempts + 1):
            try:
                response = self.client.chat.completions.create(**params)

                content = response.choices[0].message.content
                return content.strip() if content else ""

            except (APIConnectionError, RateLimitError, InternalServerError) as e:
                last_error = e
                logger.warning(f"[Attempt {attempt}/{attempts}] Groq error: {e}")

                if attempt < attempts:
                    time.sleep(sleep_seconds)

            except Exception as e:
                logger.error(f"Unexpected error in Groq chat completion: {e}")
                raise CompletionError(f"Unexpected error: {e}") from e

        raise CompletionError(
            f"Groq API failed after {attempts} attempt(s): {last_error}"
        )

    def extract_json(
        self,
        system_prompt: str,
        user_query: str,
        temperature: float = 0,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Extract structured JSON from LLM response.

        Args:
            system_prompt: System prompt for the LLM
            user_query: User query
            temperature: Sampling temperature (0-1)
            max_tokens: Output length cap

        Returns:
            Parsed JSON dictionary

        Raises:
            CompletionError: If the API call fails or the reply is not a JSON object
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_query}
        ]

        raw_response = self.chat_completion(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
        )

        try:
            parsed = json.loads(raw_response or "{}")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON returned from Groq: {raw_response}")
            raise CompletionError(f"Invalid JSON returned:\n{raw_response}") from e

        if not isinstance(parsed, dict):
            raise CompletionError(f"Expected a JSON object, got: {raw_response}")
        return parsed


def get_groq_client() -> GroqClient:
    """
    Get Groq client instance.

    Returns:
        GroqClient instance
    """
    return GroqClient()
