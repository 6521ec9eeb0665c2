"""
tierboard/orm/chat.py
Support chat: knowledge base entries and conversation history
"""
from sqlalchemy import Boolean, Column, Index, String, Text

from tierboard.orm.base import TimestampedModel


class KnowledgeBaseEntry(TimestampedModel):
    """A canned support answer, matched by keywords."""
    __tablename__ = "knowledge_base_entries"

    question = Column(String(255), nullable=False)
    answer = Column(Text, nullable=False)
    keywords = Column(String(512), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    def keyword_set(self):
        return {k.strip().lower() for k in (self.keywords or "").split(",") if k.strip()}

    def to_dict(self):
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
            "keywords": sorted(self.keyword_set()),
            "is_active": bool(self.is_active),
        }


class ChatMessage(TimestampedModel):
    __tablename__ = "chat_messages"

    conversation_id = Column(String(64), nullable=False)
    role = Column(String(16), nullable=False)  # user | assistant
    content = Column(Text, nullable=False)

    __table_args__ = (
        Index("ix_chat_messages_conversation", "conversation_id", "id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }
