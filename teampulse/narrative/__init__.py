"""Narrative generation for teampulse."""

from teampulse.narrative.gemini import GeminiCompletion, TextCompletion
from teampulse.narrative.generator import ResponseGenerator

__all__ = ["GeminiCompletion", "ResponseGenerator", "TextCompletion"]
