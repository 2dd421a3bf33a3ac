"""Flare Backend — FastAPI Routes"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from analysis import AnalysisOrchestrator, Analyzer, format_segments
from board import IncidentBoard, view_of
from bottom_sheet import BottomSheetController
from data_fetchers import search_places
from incident_store import IncidentStore
from models import (
    AnalysisResponse, DragUpdate, Incident, IncidentCreate, IncidentView,
    PlaceResult, SelectRequest, SheetResponse,
)

logger = logging.getLogger("flare")

PlaceSearch = Callable[[str], Awaitable[list[PlaceResult]]]

_allowed_origins = [
    f"http://localhost:{p}" for p in range(3000, 3010)
] + [
    f"http://localhost:{p}" for p in range(5173, 5180)
] + [
    f"http://127.0.0.1:{p}" for p in range(3000, 3010)
] + [
    f"http://127.0.0.1:{p}" for p in range(5173, 5180)
]


def _now() -> datetime:
    """Local wall-clock now; "today" for analysis is the server's calendar day."""
    return datetime.now().astimezone()


def _board(request: Request) -> IncidentBoard:
    return request.app.state.board


def _sheet(request: Request) -> BottomSheetController:
    return request.app.state.sheet


def _orchestrator(request: Request) -> AnalysisOrchestrator:
    return request.app.state.orchestrator


def _sheet_response(sheet: BottomSheetController) -> SheetResponse:
    return SheetResponse(
        state=sheet.state.value,
        offset=sheet.offset,
        minHeight=sheet.min_height,
        maxHeight=sheet.max_height,
        backgroundColor=sheet.background_color(),
    )


def _analysis_response(orchestrator: AnalysisOrchestrator) -> AnalysisResponse:
    state = orchestrator.state
    return AnalysisResponse(
        pending=state.pending,
        resultText=state.resultText,
        error=state.error,
        segments=format_segments(state.resultText) if state.resultText else [],
    )


def create_app(
    store: Optional[IncidentStore] = None,
    analyzer: Optional[Analyzer] = None,
    place_search: Optional[PlaceSearch] = None,
    sheet: Optional[BottomSheetController] = None,
    clock: Callable[[], datetime] = _now,
) -> FastAPI:
    """Build the API around explicitly provided collaborators."""
    if analyzer is None:
        from gemini_client import GeminiAnalyzer
        analyzer = GeminiAnalyzer()

    app = FastAPI(title="Flare Incident API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.board = IncidentBoard(store or IncidentStore())
    app.state.orchestrator = AnalysisOrchestrator(analyzer)
    app.state.sheet = sheet or BottomSheetController.for_viewport()
    app.state.place_search = place_search or search_places

    # ─────────────────────────── Reports ────────────────────────────

    @app.post("/api/reports", response_model=IncidentView)
    async def submit_report(report: IncidentCreate, request: Request):
        """Submit an incident; it is persisted before the response is sent."""
        now = clock()
        incident = _board(request).submit(
            title=report.title,
            description=report.description,
            location=report.location,
            timestamp=report.timestamp or now,
            latitude=report.latitude,
            longitude=report.longitude,
        )
        return view_of(incident, now)

    @app.get("/api/reports", response_model=list[IncidentView])
    async def list_reports(request: Request):
        return _board(request).refresh_display(clock())

    @app.get("/api/reports/location", response_model=list[IncidentView])
    async def location_reports(label: str, request: Request):
        """Reports filed against a map location, newest first."""
        return _board(request).refresh_display(clock(), label=label)

    @app.post("/api/reports/refresh", response_model=list[IncidentView])
    async def refresh_reports(request: Request, label: Optional[str] = None):
        board = _board(request)
        board.reload()
        return board.refresh_display(clock(), label=label)

    @app.delete("/api/reports")
    async def clear_reports(request: Request):
        _board(request).clear()
        return {"status": "cleared"}

    @app.get("/api/reports/selected", response_model=Optional[Incident])
    async def get_selected(request: Request):
        return _board(request).selected

    @app.post("/api/reports/selected", response_model=Incident)
    async def select_report(req: SelectRequest, request: Request):
        try:
            return _board(request).select(req.id)
        except KeyError:
            logger.info(f"Selection of unknown report {req.id}")
            raise HTTPException(status_code=404, detail=f"Report {req.id} not found")

    @app.delete("/api/reports/selected")
    async def clear_selected(request: Request):
        _board(request).clear_selection()
        return {"status": "cleared"}

    # ─────────────────────────── Map Search ─────────────────────────

    @app.get("/api/geocode", response_model=list[PlaceResult])
    async def geocode(query: str, request: Request):
        return await request.app.state.place_search(query)

    # ─────────────────────────── Risk Analysis ──────────────────────

    @app.post("/api/analysis", response_model=AnalysisResponse)
    async def run_analysis(request: Request):
        """Analyze today's incidents; overlapping requests supersede earlier ones."""
        orchestrator = _orchestrator(request)
        await orchestrator.run(_board(request).incidents, clock())
        return _analysis_response(orchestrator)

    @app.get("/api/analysis", response_model=AnalysisResponse)
    async def get_analysis(request: Request):
        return _analysis_response(_orchestrator(request))

    # ─────────────────────────── Bottom Sheet ───────────────────────

    @app.get("/api/sheet", response_model=SheetResponse)
    async def get_sheet(request: Request):
        return _sheet_response(_sheet(request))

    @app.post("/api/sheet/drag-start", response_model=SheetResponse)
    async def drag_start(request: Request):
        sheet = _sheet(request)
        sheet.on_drag_start()
        return _sheet_response(sheet)

    @app.post("/api/sheet/drag-update", response_model=SheetResponse)
    async def drag_update(update: DragUpdate, request: Request):
        sheet = _sheet(request)
        sheet.on_drag_update(update.delta)
        return _sheet_response(sheet)

    @app.post("/api/sheet/drag-end")
    async def drag_end(request: Request):
        sheet = _sheet(request)
        frames = sheet.on_drag_end()
        return {"sheet": _sheet_response(sheet), "frames": frames}

    # ─────────────────────────── Utility ────────────────────────────

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "version": "1.0.0"}

    return app
