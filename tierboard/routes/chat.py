"""
tierboard/routes/chat.py
Support chat widget
"""
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.database import get_db
from tierboard.schemas.chat import ChatMessageRequest
from tierboard.services import chat_service

router = APIRouter(prefix="/chat", tags=["Support Chat"])

ConversationId = Annotated[str, Path(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")]


@router.get("/status")
async def chat_status(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    status = await chat_service.knowledge_base_status(db)
    return {"success": True, **status}


@router.post("/{conversation_id}/messages")
async def send_message(
    payload: ChatMessageRequest,
    conversation_id: ConversationId,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    reply = await chat_service.send_message(db, conversation_id, payload.message)
    return {"success": True, "conversation_id": conversation_id, "reply": reply.to_dict()}


@router.get("/{conversation_id}/messages")
async def get_history(
    conversation_id: ConversationId,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    messages = await chat_service.get_history(db, conversation_id)
    return {
        "success": True,
        "conversation_id": conversation_id,
        "messages": [m.to_dict() for m in messages],
    }


@router.delete("/{conversation_id}")
async def clear_conversation(
    conversation_id: ConversationId,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    deleted = await chat_service.clear_conversation(db, conversation_id)
    return {"success": True, "deleted": deleted}
