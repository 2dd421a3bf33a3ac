"""Flare Backend — Daily risk analysis orchestration

Takes today's incidents, turns their coordinates into a prompt, and hands it
to an injected analysis collaborator. At most one request is in flight: a new
`run` cancels the outstanding one (last caller wins), and a superseded run
never publishes its result.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Protocol

from location_index import todays_incidents
from models import AnalysisSegment, AnalysisState, Incident

logger = logging.getLogger("flare.analysis")

NO_ANALYSIS = "No Analysis Performed"
ERROR_RESULT = "Error Generating AI Analysis"
ERROR_CODE = "analysis_failed"

SYSTEM_INSTRUCTION = (
    "Analyze the following geographical data and provide relevant insights, trends, "
    "or patterns based on the following alert location. Cater it towards women's safety. "
    "The goal is to be protected and minimize exposure to high risk areas"
)

_ANALYSIS_REQUEST = (
    "Please analyze these locations and provide insights related to any patterns, "
    "geographical trends, or anything that stands out.\n"
    "Any relevant details about distances, high risk clusters, frequencies of alerts "
    "from same locations, or patterns should be highlighted. Also, check for unusual "
    "patterns based on the locations and perform a risk analysis."
)


class AnalysisUnavailable(RuntimeError):
    """The analysis collaborator cannot be reached (e.g. no API key)."""


class Analyzer(Protocol):
    async def analyze(self, coordinates: list[tuple[float, float]], instructions: str) -> Optional[str]:
        ...


def coordinates_of(incidents: list[Incident]) -> list[tuple[float, float]]:
    return [(i.latitude, i.longitude) for i in incidents]


def build_prompt(coordinates: list[tuple[float, float]]) -> str:
    lines = "\n".join(f"Latitude: {lat}, Longitude: {lng}" for lat, lng in coordinates)
    return (
        "Here are the coordinates of the alerts submitted today:\n"
        f"{lines}\n\n"
        f"{_ANALYSIS_REQUEST}"
    )


def format_segments(text: str) -> list[AnalysisSegment]:
    """Split `*`-delimited emphasis into plain and bold runs.

    Empty pieces are dropped before counting, so `**bold**` reads as bold.
    """
    parts = [p for p in text.split("*") if p]
    return [AnalysisSegment(text=part, bold=(idx % 2 == 1)) for idx, part in enumerate(parts)]


class AnalysisOrchestrator:
    def __init__(self, analyzer: Analyzer):
        self._analyzer = analyzer
        self._state = AnalysisState()
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def state(self) -> AnalysisState:
        return self._state

    @property
    def pending(self) -> bool:
        return self._state.pending

    async def run(self, incidents: list[Incident], now: datetime) -> AnalysisState:
        """Analyze the incidents reported on `now`'s calendar day.

        Always returns the published state; failures become the fixed error
        sentinel rather than propagating.
        """
        today = todays_incidents(incidents, now)
        coordinates = coordinates_of(today)
        prompt = build_prompt(coordinates)
        logger.info(f"Requesting analysis of {len(coordinates)} incidents from today")

        if self._task is not None and not self._task.done():
            logger.info("Superseding in-flight analysis request")
            self._task.cancel()

        self._generation += 1
        generation = self._generation
        self._state = AnalysisState(pending=True)
        task = asyncio.ensure_future(self._analyzer.analyze(coordinates, prompt))
        self._task = task

        try:
            text = await task
            if text is not None and not isinstance(text, str):
                raise TypeError(f"malformed analysis response: {type(text).__name__}")
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.info("Analysis request superseded; result discarded")
                return self._state
            # Caller went away; don't leave the state stuck on pending
            self._state = AnalysisState(pending=False)
            raise
        except Exception as e:
            if generation != self._generation:
                return self._state
            logger.warning(f"Analysis collaborator failed: {type(e).__name__}: {e}")
            self._state = AnalysisState(pending=False, resultText=ERROR_RESULT, error=ERROR_CODE)
            return self._state

        if generation != self._generation:
            return self._state

        if not text or not text.strip():
            text = NO_ANALYSIS
        logger.info(f"Analysis received ({len(text)} chars)")
        self._state = AnalysisState(pending=False, resultText=text)
        return self._state
