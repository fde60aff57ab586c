"""
teampulse HTTP API.

Run with:
    uvicorn teampulse.main:app --reload
"""

import logging
import os
from datetime import datetime, timezone
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from teampulse import __version__
from teampulse.agent.assistant import ActivityAssistant
from teampulse.agent.models import AnswerResult
from teampulse.errors import ErrorKind
from teampulse.narrative.generator import ResponseGenerator

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="teampulse",
    description="Ask what a teammate is working on across Jira and GitHub",
    version=__version__,
)


class QueryRequest(BaseModel):
    query: str | None = None


@lru_cache
def get_assistant() -> ActivityAssistant:
    """One assistant per process; its clients own the response caches."""
    return ActivityAssistant.from_settings()


@app.get("/")
async def root():
    """API root - shows available endpoints."""
    return {
        "service": "teampulse",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "health": "/api/health",
            "query": "/api/query",
        },
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/query", response_model=AnswerResult)
async def query(request: QueryRequest, assistant: ActivityAssistant = Depends(get_assistant)):
    """Answer a question like "What is Maya working on this week?"."""
    if not request.query or not request.query.strip():
        raise HTTPException(
            status_code=400,
            detail=ResponseGenerator.generate_error_response(ErrorKind.SUBJECT_NOT_EXTRACTED, None),
        )
    logger.info(f"Received query: {request.query}")
    return await assistant.answer(request.query)
