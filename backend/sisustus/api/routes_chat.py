"""Chat assistant API routes."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from sisustus.api.deps import get_assist, get_catalog
from sisustus.config import COMMERCE_CONFIG, FALLBACK_SUGGESTIONS
from sisustus.models.chat import ChatRequest, ChatResponse
from sisustus.services.chat import run_chat
from sisustus.services.llm import AIAssist
from sisustus.storage.catalog import CatalogClient
from sisustus.storage.supabase_client import save_chat_log

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

APOLOGY_MESSAGE = (
    "Vabandust, ma ei saanud hetkel poe andmetega ühendust. Proovi palun hetke pärast uuesti "
    f"või kirjuta meile {COMMERCE_CONFIG['support_email']}."
)


@router.get("/chat/health")
async def chat_health() -> dict:
    return {"ok": True}


@router.post("/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    background_tasks: BackgroundTasks,
    catalog: CatalogClient = Depends(get_catalog),
    assist: AIAssist = Depends(get_assist),
) -> ChatResponse:
    """Answer one chat message; the transcript is logged after the response."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Sõnum on kohustuslik")

    try:
        response = run_chat(request, catalog, assist)
    except Exception:
        logger.exception("[chat] Failed to answer message")
        response = ChatResponse(
            message=APOLOGY_MESSAGE,
            suggestions=FALLBACK_SUGGESTIONS,
            cart_id=request.cart_id,
        )

    background_tasks.add_task(
        save_chat_log,
        request.session_id,
        request.cart_id,
        request.message,
        response.message,
    )
    return response
