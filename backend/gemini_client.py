"""Flare Backend — Gemini analysis collaborator

Implements the `Analyzer` contract used by `AnalysisOrchestrator`. The
orchestrator composes the prompt; this class only owns model configuration.
"""

import logging
from typing import Optional

from analysis import SYSTEM_INSTRUCTION, AnalysisUnavailable
from config import GEMINI_API_KEY, GEMINI_MODEL

logger = logging.getLogger("flare.gemini")


class GeminiAnalyzer:
    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        model_name: str = GEMINI_MODEL,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ):
        self._api_key = api_key
        self._model_name = model_name
        self._system_instruction = system_instruction
        self._model = None

    def _ensure_model(self):
        """Lazy-build the Gemini model on first use, not at import time."""
        if self._model is not None:
            return self._model
        if not self._api_key:
            raise AnalysisUnavailable("Gemini API key is not configured")

        import google.generativeai as genai
        genai.configure(api_key=self._api_key)
        self._model = genai.GenerativeModel(
            self._model_name,
            system_instruction=self._system_instruction,
            generation_config=genai.types.GenerationConfig(
                temperature=1.0,
                top_p=0.95,
                top_k=40,
                max_output_tokens=8192,
                response_mime_type="text/plain",
            ),
        )
        logger.info(f"Gemini model {self._model_name} ready")
        return self._model

    async def analyze(self, coordinates: list[tuple[float, float]], instructions: str) -> Optional[str]:
        model = self._ensure_model()
        logger.info(f"Sending {len(coordinates)} coordinates to Gemini")
        result = await model.generate_content_async(instructions)
        # .text raises ValueError when the response was blocked or has no parts
        text = result.text
        return text.strip() if text else None
