"""Main entry point for the PDF RAG Chatbot API."""
import logging
from typing import List, Optional
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, LOG_LEVEL, CORS_ORIGINS, MAX_UPLOAD_BYTES
from logger import setup_logging
from models.api import (
    ChunkOut,
    ChunkRequest,
    ChunkResponse,
    CreateSessionRequest,
    MessageOut,
    QueryRequest,
    QueryResponse,
    SessionResponse,
    Source,
    StrategyRequest,
    UploadResponse,
)
from models.chunk import Chunk
from models.session import ChatSession
from services.answer_generator import AnswerGenerator
from services.chunking_engine import ChunkingEngine, UnsupportedStrategyError
from services.document_loader import PdfParseError
from services.llm_client import LLMClient
from services.session_manager import (
    PROCESSING_ERROR_MESSAGE,
    SessionManager,
    SessionNotFoundError,
    SessionStateError,
)

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="PDF RAG Chatbot",
    description="Ask questions about an uploaded PDF, answered from its own text",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
session_manager: SessionManager = None
chunking_engine: ChunkingEngine = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global session_manager, chunking_engine

    setup_logging(LOG_LEVEL)
    logger.info("Initializing PDF RAG Chatbot services...")

    try:
        chunking_engine = ChunkingEngine()
        answer_generator = AnswerGenerator(LLMClient())
        session_manager = SessionManager(answer_generator, chunking_engine=chunking_engine)
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "PDF RAG Chatbot API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "pdf-rag-chatbot",
        "version": "1.0.0"
    }


@app.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session(request: Optional[CreateSessionRequest] = None) -> SessionResponse:
    """Start a new chat session, optionally choosing the chunking strategy."""
    strategy = request.strategy if request else None
    return _session_response(session_manager.create_session(strategy))


@app.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str) -> SessionResponse:
    """Current state, document and messages of a session."""
    try:
        return _session_response(session_manager.get_session(session_id))
    except SessionNotFoundError:
        raise _not_found(session_id)


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str) -> None:
    try:
        session_manager.delete_session(session_id)
    except SessionNotFoundError:
        raise _not_found(session_id)


@app.put("/sessions/{session_id}/strategy", response_model=SessionResponse)
def set_strategy(session_id: str, request: StrategyRequest) -> SessionResponse:
    """Choose how the next uploaded document will be chunked."""
    try:
        session = session_manager.set_strategy(session_id, request.strategy)
    except SessionNotFoundError:
        raise _not_found(session_id)
    except UnsupportedStrategyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _session_response(session)


@app.post("/sessions/{session_id}/document", response_model=UploadResponse)
async def upload_document(session_id: str, file: UploadFile = File(...)) -> UploadResponse:
    """
    Upload a PDF as the session's document.

    Any previously loaded document, its chunks and the conversation are
    discarded before the new file is processed.

    Raises:
        HTTPException: 404 for an unknown session, 413 for an oversized file,
            422 if the PDF cannot be processed
    """
    data = await file.read()
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {MAX_UPLOAD_BYTES} byte upload limit"
        )

    filename = file.filename or "document.pdf"
    try:
        session = await run_in_threadpool(
            session_manager.process_document, session_id, filename, data
        )
    except SessionNotFoundError:
        raise _not_found(session_id)
    except PdfParseError:
        raise HTTPException(status_code=422, detail=PROCESSING_ERROR_MESSAGE)

    return UploadResponse(
        session_id=session.session_id,
        state=session.state.value,
        document_name=session.document_name or filename,
        chunk_count=len(session.chunks),
        strategy=session.strategy.value
    )


@app.post("/sessions/{session_id}/query", response_model=QueryResponse)
def query_endpoint(session_id: str, request: QueryRequest) -> QueryResponse:
    """
    Answer a question about the session's document.

    Retrieves the chunks sharing the most words with the question and asks
    the LLM to answer from them only. A failed generation still completes the
    turn with an apology message and `error=true`.
    """
    if not request.question or not request.question.strip():
        raise HTTPException(status_code=400, detail="Question field is required and cannot be empty")

    logger.info(f"Processing query for session {session_id}: {request.question[:100]}...")

    try:
        result = session_manager.ask(session_id, request.question)
    except SessionNotFoundError:
        raise _not_found(session_id)
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return QueryResponse(
        answer=result.answer,
        sources=[
            Source(chunk_id=item.chunk.id, text=item.chunk.text, score=item.score)
            for item in result.sources
        ],
        error=result.error,
        latency_ms=result.latency_ms,
        model_used=result.model_used
    )


@app.post("/chunk", response_model=ChunkResponse)
def chunk_endpoint(request: ChunkRequest) -> ChunkResponse:
    """Chunk raw text without storing it, to preview a strategy."""
    try:
        chunks = chunking_engine.chunk(request.text, request.strategy)
    except UnsupportedStrategyError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ChunkResponse(
        strategy=request.strategy,
        chunk_count=len(chunks),
        chunks=[ChunkOut(id=chunk.id, text=chunk.text) for chunk in chunks]
    )


def _sources(chunks: Optional[List[Chunk]]) -> Optional[List[Source]]:
    if chunks is None:
        return None
    return [Source(chunk_id=chunk.id, text=chunk.text) for chunk in chunks]


def _session_response(session: ChatSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        state=session.state.value,
        strategy=session.strategy.value,
        document_name=session.document_name,
        chunk_count=len(session.chunks),
        error=session.error,
        messages=[
            MessageOut(author=message.author.value, text=message.text, sources=_sources(message.sources))
            for message in session.messages
        ]
    )


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Session not found: {session_id}")


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting PDF RAG Chatbot API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
