"""
Supabase client for the Sisustus assistant: stores chat transcripts in the
``chat_logs`` table when chat logging is enabled.
"""

import logging
from datetime import datetime, timezone

from supabase import Client, create_client

from sisustus.config import CHATLOG_ENABLED, SUPABASE_SERVICE_KEY, SUPABASE_URL

logger = logging.getLogger(__name__)

_supabase: Client | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def chatlog_configured() -> bool:
    return CHATLOG_ENABLED and bool(SUPABASE_URL) and bool(SUPABASE_SERVICE_KEY)


def get_client() -> Client:
    """Create the Supabase client on first use."""
    global _supabase
    if _supabase is None:
        _supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _supabase


# ---------------------------------------------------------------------------
# Chat logs
# ---------------------------------------------------------------------------

def save_chat_log(
    session_id: str | None,
    cart_id: str | None,
    user_message: str,
    assistant_message: str,
    client: Client | None = None,
) -> bool:
    """
    Insert one chat exchange into the chat_logs table.

    Does nothing unless chat logging is enabled and Supabase is configured.
    Failures are logged and reported as False; a logging problem never
    breaks the chat reply.
    """
    if client is None:
        if not chatlog_configured():
            return False
        client = get_client()

    row = {
        "session_id": session_id,
        "cart_id": cart_id,
        "user_message": user_message,
        "assistant_message": assistant_message,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    try:
        client.table("chat_logs").insert(row).execute()
    except Exception as exc:
        logger.error("[chatlog] Failed to save chat log: %s", exc)
        return False
    return True
