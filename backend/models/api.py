"""API request and response models."""
from typing import List, Optional
from pydantic import BaseModel, Field

from .chunk import ChunkingStrategy


class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions."""
    strategy: Optional[ChunkingStrategy] = None


class StrategyRequest(BaseModel):
    """Request body for PUT /sessions/{session_id}/strategy."""
    strategy: str


class QueryRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/query."""
    question: str = Field(..., description="Question about the loaded document")


class ChunkRequest(BaseModel):
    """Request body for POST /chunk."""
    text: str
    strategy: str = "recursive"


class Source(BaseModel):
    """A chunk cited by an answer."""
    chunk_id: int
    text: str
    score: Optional[int] = None


class ChunkOut(BaseModel):
    """Chunk as returned by the API."""
    id: int
    text: str


class MessageOut(BaseModel):
    """Chat message as returned by the API."""
    author: str
    text: str
    sources: Optional[List[Source]] = None


class SessionResponse(BaseModel):
    """Summary of a chat session."""
    session_id: str
    state: str
    strategy: str
    document_name: Optional[str] = None
    chunk_count: int = 0
    error: Optional[str] = None
    messages: List[MessageOut] = []


class UploadResponse(BaseModel):
    """Result of processing an uploaded document."""
    session_id: str
    state: str
    document_name: str
    chunk_count: int
    strategy: str


class QueryResponse(BaseModel):
    """Answer to a question about the loaded document."""
    answer: str
    sources: List[Source]
    error: bool = False
    latency_ms: Optional[int] = None
    model_used: Optional[str] = None


class ChunkResponse(BaseModel):
    """Result of stateless chunking."""
    strategy: str
    chunk_count: int
    chunks: List[ChunkOut]
