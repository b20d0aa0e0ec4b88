"""Direct question endpoints for checking retrieval and model connectivity."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..dependencies import AppServices, get_services

router = APIRouter()
logger = logging.getLogger(__name__)


class QuestionRequest(BaseModel):
    question: str = ""


class AnswerResponse(BaseModel):
    question: str
    answer: str | None = None
    source: str | None = None
    error: str | None = None


@router.post("/ask", response_model=AnswerResponse)
async def ask(request: QuestionRequest, services: AppServices = Depends(get_services)):
    """Query the knowledge base directly, as the voice tool would."""
    if not request.question.strip():
        raise HTTPException(status_code=400, detail="Question is required")

    logger.info(f"Test query received: {request.question}")
    try:
        answer = await services.answerer.answer(request.question)
    except Exception as e:
        logger.error("Error answering question", exc_info=True)
        return AnswerResponse(question=request.question, error=str(e))

    return AnswerResponse(question=request.question, answer=answer, source="textbook-rag")


@router.post("/simple", response_model=AnswerResponse)
async def simple(request: QuestionRequest, services: AppServices = Depends(get_services)):
    """Ask the model without retrieval."""
    question = request.question.strip() or "Hello"
    try:
        answer = await services.answerer.simple_query(question)
    except Exception as e:
        logger.error("Error in simple query", exc_info=True)
        return AnswerResponse(question=question, error=str(e))

    return AnswerResponse(question=question, answer=answer)
