"""
Support Chat Service

Backs the floating support chat widget. Replies come from the knowledge
base: the active entry sharing the most keywords with the message wins,
ties going to the oldest entry. With no match a fallback reply is sent.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tierboard.exceptions import KnowledgeEntryNotFoundError
from tierboard.orm.chat import ChatMessage, KnowledgeBaseEntry

logger = logging.getLogger(__name__)

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"

FALLBACK_REPLY = (
    "Sorry, I couldn't find an answer to that. Please open a ticket on our "
    "Discord and a staff member will help you."
)
NO_KNOWLEDGE_BASE_REPLY = (
    "The support assistant isn't set up yet. Please reach out to staff on Discord."
)

_WORD_RE = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> List[str]:
    return _WORD_RE.findall((text or "").lower())


def score_entry(message_words: List[str], keywords: Iterable[str]) -> int:
    """Number of keywords present in the message; multi-word keywords match as phrases."""
    words = set(message_words)
    phrase = " " + " ".join(message_words) + " "
    score = 0
    for keyword in keywords:
        parts = tokenize(keyword)
        if not parts:
            continue
        if len(parts) == 1:
            score += parts[0] in words
        else:
            score += f" {' '.join(parts)} " in phrase
    return score


def best_match(message: str, entries: List[KnowledgeBaseEntry]) -> Optional[KnowledgeBaseEntry]:
    words = tokenize(message)
    best: Tuple[int, Optional[KnowledgeBaseEntry]] = (0, None)
    for entry in sorted(entries, key=lambda e: e.id):
        score = score_entry(words, entry.keyword_set())
        if score > best[0]:
            best = (score, entry)
    return best[1]


async def _active_entries(db: AsyncSession) -> List[KnowledgeBaseEntry]:
    result = await db.execute(
        select(KnowledgeBaseEntry)
        .where(KnowledgeBaseEntry.is_active.is_(True))
        .order_by(KnowledgeBaseEntry.id)
    )
    return list(result.scalars().all())


async def knowledge_base_status(db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(
        select(func.count()).select_from(KnowledgeBaseEntry).where(KnowledgeBaseEntry.is_active.is_(True))
    )
    count = int(result.scalar() or 0)
    return {"has_knowledge_base": count > 0, "entries": count}


async def send_message(db: AsyncSession, conversation_id: str, content: str) -> ChatMessage:
    """Store the user's message and the assistant reply. Returns the reply."""
    db.add(ChatMessage(conversation_id=conversation_id, role=USER_ROLE, content=content))

    entries = await _active_entries(db)
    if not entries:
        reply = NO_KNOWLEDGE_BASE_REPLY
    else:
        match = best_match(content, entries)
        reply = match.answer if match else FALLBACK_REPLY
        logger.debug(
            f"Chat {conversation_id}: matched entry {match.id if match else None}"
        )

    assistant = ChatMessage(conversation_id=conversation_id, role=ASSISTANT_ROLE, content=reply)
    db.add(assistant)
    await db.commit()
    await db.refresh(assistant)
    return assistant


async def get_history(db: AsyncSession, conversation_id: str) -> List[ChatMessage]:
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.conversation_id == conversation_id)
        .order_by(ChatMessage.id)
    )
    return list(result.scalars().all())


async def clear_conversation(db: AsyncSession, conversation_id: str) -> int:
    result = await db.execute(
        delete(ChatMessage).where(ChatMessage.conversation_id == conversation_id)
    )
    await db.commit()
    return result.rowcount or 0


# ================= KNOWLEDGE BASE ADMIN =================

async def list_entries(db: AsyncSession, include_inactive: bool = False) -> List[KnowledgeBaseEntry]:
    query = select(KnowledgeBaseEntry).order_by(KnowledgeBaseEntry.id)
    if not include_inactive:
        query = query.where(KnowledgeBaseEntry.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def add_entry(db: AsyncSession, question: str, answer: str, keywords: Iterable[str]) -> KnowledgeBaseEntry:
    entry = KnowledgeBaseEntry(
        question=question.strip(),
        answer=answer.strip(),
        keywords=",".join(k.strip().lower() for k in keywords if k.strip()),
        is_active=True,
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    logger.info(f"Knowledge base entry {entry.id} added")
    return entry


async def deactivate_entry(db: AsyncSession, entry_id: int) -> KnowledgeBaseEntry:
    entry = await db.get(KnowledgeBaseEntry, entry_id)
    if entry is None:
        raise KnowledgeEntryNotFoundError(entry_id)
    entry.is_active = False
    await db.commit()
    return entry


async def seed_entries(db: AsyncSession, entries: List[Dict[str, Any]]) -> int:
    """Add entries whose question is not already present. Returns the number added."""
    result = await db.execute(select(KnowledgeBaseEntry.question))
    existing = {row[0] for row in result.all()}

    added = 0
    for item in entries:
        if item["question"] in existing:
            continue
        db.add(KnowledgeBaseEntry(
            question=item["question"],
            answer=item["answer"],
            keywords=",".join(item.get("keywords", [])),
            is_active=True,
        ))
        added += 1
    await db.commit()
    logger.info(f"Seeded {added} knowledge base entr{'y' if added == 1 else 'ies'}")
    return added
