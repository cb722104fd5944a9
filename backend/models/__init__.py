"""Data models for the PDF RAG Chatbot."""
from .document import Document, Page
from .chunk import Chunk, ChunkingStrategy, ScoredChunk
from .session import Author, ChatSession, Message, SessionState
from .api import (
    ChunkRequest,
    ChunkResponse,
    CreateSessionRequest,
    QueryRequest,
    QueryResponse,
    SessionResponse,
    Source,
    StrategyRequest,
    UploadResponse,
)

__all__ = [
    "Document",
    "Page",
    "Chunk",
    "ChunkingStrategy",
    "ScoredChunk",
    "Author",
    "ChatSession",
    "Message",
    "SessionState",
    "ChunkRequest",
    "ChunkResponse",
    "CreateSessionRequest",
    "QueryRequest",
    "QueryResponse",
    "SessionResponse",
    "Source",
    "StrategyRequest",
    "UploadResponse",
]
