"""Session manager holding each user's document chunks and chat history."""
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union

from models.chunk import ChunkingStrategy, ScoredChunk
from models.session import Author, ChatSession, Message, SessionState
from services.answer_generator import AnswerGenerator, GenerationFailedError
from services.chunking_engine import ChunkingEngine, parse_strategy
from services.document_loader import DocumentLoader, PdfParseError
from services.retrieval_engine import RetrievalEngine
from config import DEFAULT_CHUNKING_STRATEGY

logger = logging.getLogger(__name__)

PROCESSING_ERROR_MESSAGE = "Failed to process PDF. Please try another file."
GENERATION_ERROR_MESSAGE = (
    "Sorry, I encountered an error trying to generate a response. "
    "Please check your API key and try again."
)
READY_MESSAGE = 'Successfully processed "{filename}". I\'m ready to answer your questions.'


class SessionNotFoundError(KeyError):
    """Raised when a session id is unknown."""


class SessionStateError(Exception):
    """Raised when an operation is not allowed in the session's current state."""


@dataclass
class QueryResult:
    """Outcome of one question: the AI message plus retrieval detail."""
    answer: str
    sources: List[ScoredChunk] = field(default_factory=list)
    error: bool = False
    latency_ms: Optional[int] = None
    model_used: Optional[str] = None


class SessionManager:
    """
    Manages in-memory chat sessions.

    Each session owns one document's chunk collection. A new upload clears the
    previous chunks and messages before extraction starts, and the chunks are
    swapped in as a whole once chunking finishes. If another upload to the same
    session started in the meantime, the older result is dropped.
    """

    def __init__(
        self,
        answer_generator: AnswerGenerator,
        document_loader: Optional[DocumentLoader] = None,
        chunking_engine: Optional[ChunkingEngine] = None,
        retrieval_engine: Optional[RetrievalEngine] = None,
        default_strategy: Union[ChunkingStrategy, str] = DEFAULT_CHUNKING_STRATEGY,
    ):
        self.answer_generator = answer_generator
        self.document_loader = document_loader or DocumentLoader()
        self.chunking_engine = chunking_engine or ChunkingEngine()
        self.retrieval_engine = retrieval_engine or RetrievalEngine()
        self.default_strategy = parse_strategy(default_strategy)

        self._sessions: Dict[str, ChatSession] = {}
        self._lock = threading.Lock()
        logger.info("SessionManager initialized")

    def create_session(self, strategy: Union[ChunkingStrategy, str, None] = None) -> ChatSession:
        """Create an empty session in the initial state."""
        strategy = parse_strategy(strategy) if strategy is not None else self.default_strategy
        session = ChatSession(
            session_id=f"sess_{uuid.uuid4().hex[:12]}",
            strategy=strategy,
            created_at=datetime.now()
        )
        with self._lock:
            self._sessions[session.session_id] = session

        logger.info(f"Created session {session.session_id} (strategy={strategy.value})")
        return session

    def get_session(self, session_id: str) -> ChatSession:
        """
        Look up a session.

        Raises:
            SessionNotFoundError: If the id is unknown
        """
        with self._lock:
            return self._get(session_id)

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            self._get(session_id)
            del self._sessions[session_id]
        logger.info(f"Deleted session {session_id}")

    def set_strategy(self, session_id: str, strategy: Union[ChunkingStrategy, str]) -> ChatSession:
        """
        Choose the chunking strategy for the session's document.

        Raises:
            UnsupportedStrategyError: If the strategy is not recognized
            SessionStateError: If a document is already loaded or being processed
        """
        strategy = parse_strategy(strategy)
        with self._lock:
            session = self._get(session_id)
            if session.state != SessionState.INITIAL:
                raise SessionStateError(
                    f"Chunking strategy can only be changed before a document is loaded "
                    f"(session is {session.state.value})"
                )
            session.strategy = strategy

        logger.info(f"Session {session_id} strategy set to {strategy.value}")
        return session

    def process_document(self, session_id: str, filename: str, data: bytes) -> ChatSession:
        """
        Extract, chunk and install a document as the session's context.

        Args:
            session_id: Target session
            filename: Uploaded filename shown to the user
            data: Raw PDF bytes

        Returns:
            The session after processing

        Raises:
            SessionNotFoundError: If the id is unknown
            PdfParseError: If the PDF cannot be read; the session is reset to
                the initial state with a user-facing error
        """
        with self._lock:
            session = self._get(session_id)
            session.upload_seq += 1
            upload_seq = session.upload_seq
            strategy = session.strategy

            session.state = SessionState.PROCESSING
            session.error = None
            session.document_name = None
            session.chunks = ()
            session.messages = []

        logger.info(f"Processing {filename} for session {session_id} (upload #{upload_seq})")

        try:
            text = self.document_loader.extract_text(data, filename)
        except PdfParseError:
            logger.error(f"Failed to process {filename} for session {session_id}", exc_info=True)
            with self._lock:
                if session.upload_seq == upload_seq:
                    session.state = SessionState.INITIAL
                    session.error = PROCESSING_ERROR_MESSAGE
            raise

        chunks = tuple(self.chunking_engine.chunk(text, strategy))

        with self._lock:
            if session.upload_seq != upload_seq:
                logger.info(f"Discarding superseded upload #{upload_seq} for session {session_id}")
                return session

            session.chunks = chunks
            session.document_name = filename
            session.state = SessionState.READY
            session.messages = [Message(author=Author.AI, text=READY_MESSAGE.format(filename=filename))]

        logger.info(f"Session {session_id} ready with {len(chunks)} chunks from {filename}")
        return session

    def ask(self, session_id: str, question: str) -> QueryResult:
        """
        Answer a question against the session's current document.

        A generation failure does not raise: the apology message is recorded
        as the AI's reply and the result is flagged as an error.

        Raises:
            ValueError: If the question is blank
            SessionNotFoundError: If the id is unknown
            SessionStateError: If no document is ready
        """
        if not question or not question.strip():
            raise ValueError("Question cannot be empty")

        with self._lock:
            session = self._get(session_id)
            if session.state != SessionState.READY:
                raise SessionStateError(
                    f"No document is ready for questions (session is {session.state.value})"
                )
            chunks = session.chunks
            upload_seq = session.upload_seq
            session.messages.append(Message(author=Author.USER, text=question))

        logger.debug(f"Session {session_id} question: {question[:100]}")

        scored = self.retrieval_engine.retrieve_scored(question, chunks)
        relevant = [item.chunk for item in scored]

        try:
            answer = self.answer_generator.answer(question, relevant)
            result = QueryResult(
                answer=answer.text,
                sources=scored,
                latency_ms=answer.latency_ms,
                model_used=answer.model_used
            )
            reply = Message(author=Author.AI, text=answer.text, sources=relevant)
        except GenerationFailedError as e:
            logger.error(f"Generation failed for session {session_id}: [{e.code}] {e}")
            result = QueryResult(answer=GENERATION_ERROR_MESSAGE, error=True)
            reply = Message(author=Author.AI, text=GENERATION_ERROR_MESSAGE)

        with self._lock:
            # A newer upload has already cleared this conversation
            if session.upload_seq == upload_seq:
                session.messages.append(reply)

        return result

    def _get(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session
