"""Textbook search tool called by Ultravox during a live call."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..dependencies import AppServices, get_services

router = APIRouter()
logger = logging.getLogger(__name__)

FALLBACK_ANSWER = (
    "I couldn't find information about that in the textbook. "
    "Please try asking in a different way."
)


class ToolQuery(BaseModel):
    """Body Ultravox sends for the searchTextbook tool."""

    question: str | None = None


class ToolResult(BaseModel):
    """Ultravox reads the tool output from `result`."""

    result: str


@router.post("/query", response_model=ToolResult)
async def query(request: ToolQuery, services: AppServices = Depends(get_services)):
    """
    Answer a student's question from the textbook.

    Domain failures never surface as errors: the tool always returns a
    speakable `result`.
    """
    question = (request.question or "").strip()
    if not question:
        logger.warning("RAG query called with empty question")
        return JSONResponse(
            status_code=400,
            content={"result": "No question was provided. Please ask a specific question."},
        )

    logger.info(f"RAG tool called by Ultravox - Question: {question}")
    try:
        answer = await services.answerer.answer(question)
    except Exception:
        logger.error("Error in RAG query", exc_info=True)
        return ToolResult(result=FALLBACK_ANSWER)

    logger.info(f"RAG response generated, length: {len(answer)} chars")
    return ToolResult(result=answer)
