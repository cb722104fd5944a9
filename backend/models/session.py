"""Chat session data models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .chunk import Chunk, ChunkingStrategy


class Author(str, Enum):
    """Who wrote a message."""
    USER = "user"
    AI = "ai"


class SessionState(str, Enum):
    """Lifecycle of a chat session: initial -> processing -> ready."""
    INITIAL = "initial"
    PROCESSING = "processing"
    READY = "ready"


@dataclass
class Message:
    """Represents a single message in a chat session."""
    author: Author
    text: str
    sources: Optional[List[Chunk]] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ChatSession:
    """
    Per-user document context.

    Attributes:
        session_id: Unique session identifier
        strategy: Chunking strategy applied to the next upload
        state: Current lifecycle state
        document_name: Filename of the loaded document, if any
        chunks: Immutable snapshot of the current document's chunks
        messages: Conversation shown to the user
        error: Last processing error shown to the user
        upload_seq: Sequence number of the most recent upload
    """
    session_id: str
    strategy: ChunkingStrategy
    created_at: datetime
    state: SessionState = SessionState.INITIAL
    document_name: Optional[str] = None
    chunks: Tuple[Chunk, ...] = ()
    messages: List[Message] = field(default_factory=list)
    error: Optional[str] = None
    upload_seq: int = 0
