"""
framescript Main Application
============================

FastAPI entry point for the frame-sampling and visual-summary service.

A client uploads a video once to open an analysis session, forwards the
session's analysis payload to the multimodal model, then posts the
model's shot list back for the color script composite.

Endpoints:
    GET    /                                  - Service information
    GET    /health                            - Liveness probe
    POST   /sessions?file_name=clip.mp4       - Upload raw video bytes, sample
    GET    /sessions/{id}                     - Session summary
    GET    /sessions/{id}/frames              - Sampled frames
    GET    /sessions/{id}/payload             - Analysis model payload
    GET    /sessions/{id}/palette             - Dominant colours
    POST   /sessions/{id}/composite           - Color script JPEG
    GET    /sessions/{id}/capture?timestamp=  - Native-resolution frame JPEG
    POST   /sessions/{id}/capture/shot        - Opening frame of a shot
    GET    /sessions/{id}/poster-reference    - 9:16 crop of a frame
    DELETE /sessions/{id}                     - Discard session
    POST   /shots/summary                     - Shot list statistics
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from framescript.analysis import build_payload, summarize_shots
from framescript.composite import resolve_frame_index
from framescript.config import settings
from framescript.errors import FramescriptError
from framescript.imaging import VERTICAL_RATIO, crop_to_vertical
from framescript.models import ShotData, ShotReference
from framescript.pipeline import Pipeline
from framescript.session import AnalysisSession, SessionStore
from framescript.video import capture_high_res, capture_shot_frame


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_pipeline: Optional[Pipeline] = None
_session_store: Optional[SessionStore] = None
_startup_time: float = 0.0

# Error code -> HTTP status
_STATUS_BY_ERROR_CODE = {
    "VIDEO_TOO_LONG": 413,
    "DECODE_FAILED": 422,
    "IMAGE_DECODE_FAILED": 422,
    "EMPTY_INPUT": 400,
    "SAMPLING_CANCELLED": 409,
}


def get_pipeline() -> Pipeline:
    if _pipeline is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _pipeline


def get_session_store() -> SessionStore:
    if _session_store is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _session_store


def _require_session(session_id: str) -> AnalysisSession:
    session = get_session_store().get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
    return session


# =============================================================================
# Request Models
# =============================================================================

class CompositeRequest(BaseModel):
    """Body of POST /sessions/{id}/composite."""

    shots: List[ShotReference] = Field(..., description="Shots in display order")
    columns: Optional[int] = Field(default=None, ge=1, le=16, description="Grid columns")
    show_labels: bool = Field(default=False, description="Stamp shot numbers on cells")
    payload_indices: bool = Field(
        default=False,
        description="thumbnailIndex values refer to the analysis payload, not the full frame list",
    )


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create pipeline components on startup, discard sessions on shutdown."""
    global _pipeline, _session_store, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    _pipeline = Pipeline.from_settings(settings)
    _session_store = SessionStore(max_sessions=settings.sessions.max_sessions)

    yield

    logger.info("Shutting down, discarding sessions...")
    _session_store.clear()
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="framescript",
    description="Frame sampling, colour summaries and color script composites for video analysis",
    version=settings.service.version,
    lifespan=lifespan,
)


@app.exception_handler(FramescriptError)
async def framescript_error_handler(request: Request, exc: FramescriptError) -> JSONResponse:
    """Map pipeline errors to distinct statuses so clients can suggest a remedy."""
    status = _STATUS_BY_ERROR_CODE.get(exc.error_code, 500)
    if status >= 500:
        logger.error(f"{request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.url.path} rejected ({exc.error_code}): {exc}")
    return JSONResponse(
        {"error": exc.error_code, "message": str(exc)},
        status_code=status,
    )


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": settings.service.name,
        "version": settings.service.version,
        "status": "running",
        "max_duration_seconds": settings.sampling.max_duration_seconds,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe - always 200 while the process is up."""
    store = _session_store
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "sessions": len(store) if store is not None else 0,
    })


@app.post("/sessions", status_code=201)
async def create_session(
    request: Request,
    file_name: str = Query(default="video.mp4", min_length=1),
) -> JSONResponse:
    """Upload raw video bytes and sample them into a new session."""
    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Request body must contain the video")

    pipeline = get_pipeline()
    store = get_session_store()
    session = await run_in_threadpool(store.create, file_name, data, pipeline.sampler)
    return JSONResponse(session.to_dict(), status_code=201)


@app.get("/sessions/{session_id}")
async def get_session(session_id: str) -> JSONResponse:
    return JSONResponse(_require_session(session_id).to_dict())


@app.get("/sessions/{session_id}/frames")
async def list_frames(session_id: str, include_data: bool = False) -> JSONResponse:
    """Sampled frames; pixel data (base64 JPEG) only when include_data is set."""
    session = _require_session(session_id)
    frames = []
    for index, frame in enumerate(session.frames):
        item = {
            "index": index,
            "timestamp": round(frame.timestamp, 3),
            "width": frame.width,
            "height": frame.height,
        }
        if include_data:
            item["data"] = frame.to_base64()
        frames.append(item)
    return JSONResponse({"frames": frames})


@app.get("/sessions/{session_id}/payload")
async def analysis_payload(session_id: str) -> JSONResponse:
    """Frames prepared for the analysis model, with the sent -> source index map."""
    session = _require_session(session_id)
    payload = build_payload(
        session.frames,
        session.file_name,
        max_frames=settings.payload.max_frames,
    )
    return JSONResponse({
        "file_name": payload.file_name,
        "frame_count": len(payload.frames),
        "source_indices": [entry.source_index for entry in payload.frames],
        "parts": payload.to_parts(),
    })


@app.get("/sessions/{session_id}/palette")
async def palette(
    session_id: str,
    max_colors: Optional[int] = Query(default=None, ge=1, le=32),
) -> JSONResponse:
    """Dominant colours of the session's frames, most frequent first."""
    session = _require_session(session_id)
    summarizer = get_pipeline().summarizer
    entries = await run_in_threadpool(
        summarizer.summarize_entries,
        session.frames,
        max_colors or settings.palette.max_colors,
    )
    return JSONResponse({
        "colors": [entry.color_hex for entry in entries],
        "entries": [
            {"color": entry.color_hex, "frequency": entry.frequency}
            for entry in entries
        ],
    })


@app.post("/sessions/{session_id}/composite")
async def composite(session_id: str, body: CompositeRequest) -> Response:
    """
    Render the color script as a JPEG.

    With ``payload_indices`` set, thumbnail indices are read against the
    decimated analysis payload and mapped back to the full frame list.
    """
    session = _require_session(session_id)
    compositor = get_pipeline().compositor
    columns = body.columns or settings.composite.default_columns

    shots = body.shots
    if body.payload_indices:
        payload = build_payload(
            session.frames,
            session.file_name,
            max_frames=settings.payload.max_frames,
        )
        shots = payload.resolve_shots(shots)

    result = await run_in_threadpool(
        compositor.composite,
        shots,
        session.frames,
        session.metadata,
        columns,
        body.show_labels,
    )
    jpeg = await run_in_threadpool(result.to_jpeg, settings.composite.jpeg_quality)
    return Response(
        content=jpeg,
        media_type="image/jpeg",
        headers={
            "X-Fallback-Cells": ",".join(str(c) for c in result.fallback_cells),
            "X-Skipped-Cells": ",".join(str(c) for c in result.skipped_cells),
        },
    )


@app.get("/sessions/{session_id}/capture")
async def capture(session_id: str, timestamp: float = Query(..., ge=0)) -> Response:
    """Native-resolution frame at ``timestamp``, in its own decode session."""
    session = _require_session(session_id)
    jpeg = await run_in_threadpool(
        capture_high_res,
        session.video_path,
        timestamp,
        settings.capture.jpeg_quality,
    )
    return Response(content=jpeg, media_type="image/jpeg")


@app.post("/sessions/{session_id}/capture/shot")
async def capture_shot(session_id: str, shot: ShotData) -> Response:
    """Native-resolution opening frame of a shot."""
    session = _require_session(session_id)
    try:
        jpeg = await run_in_threadpool(
            capture_shot_frame,
            session.video_path,
            shot,
            settings.capture.shot_offset_seconds,
            settings.capture.jpeg_quality,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return Response(content=jpeg, media_type="image/jpeg")


@app.get("/sessions/{session_id}/poster-reference")
async def poster_reference(session_id: str, frame_index: int = Query(default=0)) -> Response:
    """9:16 centre crop of a sampled frame (out-of-range indices use frame 0)."""
    session = _require_session(session_id)
    if not session.frames:
        raise HTTPException(status_code=404, detail="Session has no frames")

    frame = session.frames[resolve_frame_index(frame_index, len(session.frames))]
    jpeg = await run_in_threadpool(
        crop_to_vertical,
        frame.pixels,
        VERTICAL_RATIO,
        settings.capture.poster_jpeg_quality,
    )
    return Response(content=jpeg, media_type="image/jpeg")


@app.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str) -> Response:
    if not get_session_store().discard(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
    return Response(status_code=204)


@app.post("/shots/summary")
async def shots_summary(shots: List[ShotData]) -> JSONResponse:
    """Shot count, total/average duration and shot size distribution."""
    return JSONResponse(summarize_shots(shots).to_dict())


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "framescript.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
