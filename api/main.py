# api/main.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from fastapi.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from tarot_reader import llm, tarot_core
from tarot_reader.client import InterpretationError
from tarot_reader.config import Settings, load_settings
from tarot_reader.interpret import ChatFn, interpret_reading
from tarot_reader.log import setup_logging
from tarot_reader.logic import perform_draw

logger = logging.getLogger(__name__)


# ---------- Pydantic Schemas ----------
class DrawRequest(BaseModel):
    question: Optional[str] = Field(None, description="The user's question (optional)")
    spread: Optional[str] = Field(None, description="single|three|celtic|horseshoe; defaults to single")


class HealthResponse(BaseModel):
    status: str
    version: str
    has_gemini_token: bool


# ---------- Dependencies ----------
def get_settings() -> Settings:
    return load_settings()


def get_chat_fn() -> ChatFn:
    return llm.chat


# ---------- FastAPI app ----------
setup_logging(load_settings().log_level)

app = FastAPI(title="Tarot Reader API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_methods=["*"], allow_headers=["*"], allow_credentials=False
)


def _error(
    status: int,
    message: str,
    details: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {"error": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status, content=body, headers=headers)


# Every error response uses the {error[, details]} shape
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return _error(exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error(400, "Invalid request body.", details=str(exc.errors()))


@app.exception_handler(tarot_core.TarotCoreError)
async def tarot_error_handler(request: Request, exc: tarot_core.TarotCoreError):
    return _error(400, str(exc))


@app.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(
        status="ok",
        version=app.version,
        has_gemini_token=bool(settings.gemini_token),
    )


@app.get("/v1/spreads")
def list_spreads():
    return {"spreads": [s.to_dict() for s in tarot_core.list_spreads()]}


@app.get("/v1/deck")
def deck():
    return {"cards": [c.to_dict() for c in tarot_core.DECK]}


@app.post("/v1/draw")
def draw(req: DrawRequest):
    session = perform_draw(question=req.question, spread_key=req.spread)
    return session.to_payload()


@app.post("/api/interpret")
async def interpret(
    request: Request,
    settings: Settings = Depends(get_settings),
    chat_fn: ChatFn = Depends(get_chat_fn),
):
    raw = await request.body()
    try:
        text = await run_in_threadpool(interpret_reading, raw, settings, chat_fn)
    except InterpretationError as e:
        return _error(e.status or 500, e.message, e.details)
    return {"text": text}
