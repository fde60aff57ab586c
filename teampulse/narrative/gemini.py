"""
Gemini text completion via Vertex AI (google-genai).

Prerequisites:
    gcloud auth application-default login   (or GOOGLE_APPLICATION_CREDENTIALS)
    GCP_PROJECT_ID set, Vertex AI API enabled
"""

import logging
import os
from typing import Protocol

from google import genai
from google.genai import types

from teampulse.config import LLMSettings

logger = logging.getLogger(__name__)


class TextCompletion(Protocol):
    """Anything that can turn a system + user prompt into text."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


class GeminiCompletion:
    """TextCompletion backed by a Gemini model on Vertex AI."""

    def __init__(
        self,
        settings: LLMSettings,
        client: genai.Client | None = None,
        temperature: float = 0.7,
        max_output_tokens: int = 500,
    ):
        self.settings = settings
        self.model = settings.model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._client = client

    def _get_client(self) -> genai.Client:
        # Built lazily so a missing credential surfaces as a completion failure
        if self._client is None:
            creds_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            if creds_path and not os.path.exists(creds_path):
                logger.warning(f"Credentials file not found: {creds_path}")
            self._client = genai.Client(
                vertexai=True,
                project=self.settings.project_id,
                location=self.settings.location,
            )
            logger.info("Gemini client initialized successfully")
        return self._client

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        client = self._get_client()
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            ),
        )
        text = (response.text or "").strip()
        if not text:
            raise ValueError("Gemini returned an empty completion")
        return text
