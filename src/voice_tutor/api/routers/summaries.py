"""Conversation summary endpoints."""

import asyncio
import logging
import time

from fastapi import APIRouter, Depends, HTTPException

from ...models.summary import GenerateSummaryRequest, SummaryResponse
from ..dependencies import AppServices, get_services

router = APIRouter()
logger = logging.getLogger(__name__)


def _manual_call_id() -> str:
    return f"manual-{int(time.time() * 1000)}"


@router.get("", response_model=list[SummaryResponse])
async def list_summaries(services: AppServices = Depends(get_services)):
    """List all conversation summaries, most recent first."""
    logger.info("Fetching all conversation summaries")
    return await asyncio.to_thread(services.repository.list_all)


@router.get("/caller/{caller_number}", response_model=list[SummaryResponse])
async def list_caller_summaries(caller_number: str, services: AppServices = Depends(get_services)):
    """List summaries for one caller, most recent first."""
    logger.info(f"Fetching summaries for caller: {caller_number}")
    return await asyncio.to_thread(services.repository.list_by_caller, caller_number)


@router.get("/call/{call_id}", response_model=SummaryResponse)
async def get_call_summary(call_id: str, services: AppServices = Depends(get_services)):
    """Get the summary of a Twilio call."""
    summary = await asyncio.to_thread(services.repository.get_by_call_id, call_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Summary not found")
    return summary


@router.get("/{summary_id}", response_model=SummaryResponse)
async def get_summary(summary_id: int, services: AppServices = Depends(get_services)):
    """Get a summary by ID."""
    logger.info(f"Fetching summary with ID: {summary_id}")
    summary = await asyncio.to_thread(services.repository.get, summary_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Summary not found")
    return summary


@router.post("/generate", response_model=SummaryResponse)
async def generate_summary(request: GenerateSummaryRequest, services: AppServices = Depends(get_services)):
    """
    Manually (re)run summary generation for a call.

    Useful for reprocessing failed summaries. A missing `call_id` gets a
    synthetic `manual-<millis>` id.
    """
    if not request.remote_session_id.strip():
        raise HTTPException(status_code=400, detail="remote_session_id is required")

    call_id = (request.call_id or "").strip() or _manual_call_id()
    logger.info(f"Manually generating summary for callId: {call_id}, ultravoxCallId: {request.remote_session_id}")
    return await services.summarizer.summarize(call_id, request.remote_session_id, request.caller_number)


@router.post("/generate/{remote_session_id}", response_model=SummaryResponse)
async def generate_summary_for_session(remote_session_id: str, services: AppServices = Depends(get_services)):
    """Generate a summary directly from an Ultravox call ID."""
    logger.info(f"Generating summary for Ultravox call: {remote_session_id}")
    return await services.summarizer.summarize(_manual_call_id(), remote_session_id, "unknown")
