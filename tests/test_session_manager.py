"""Unit tests for SessionManager."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock
from models.chunk import Chunk, ChunkingStrategy
from models.session import Author, SessionState
from services.answer_generator import Answer, GenerationFailedError
from services.chunking_engine import ChunkingEngine, UnsupportedStrategyError
from services.document_loader import PdfParseError
from services.session_manager import (
    GENERATION_ERROR_MESSAGE,
    PROCESSING_ERROR_MESSAGE,
    SessionManager,
    SessionNotFoundError,
    SessionStateError,
)

DOCUMENT_TEXT = (
    "Transformers use self attention to relate tokens.\n\n"
    "Convolutional networks use local filters over images.\n\n"
)


@pytest.fixture
def document_loader():
    loader = Mock()
    loader.extract_text.return_value = DOCUMENT_TEXT
    return loader


@pytest.fixture
def answer_generator():
    generator = Mock()
    generator.answer.side_effect = lambda query, chunks: Answer(
        text="Self attention.",
        sources=list(chunks),
        latency_ms=120,
        model_used="llama-3.1-8b-instant"
    )
    return generator


@pytest.fixture
def manager(document_loader, answer_generator):
    return SessionManager(
        answer_generator,
        document_loader=document_loader,
        chunking_engine=ChunkingEngine(recursive_size=60, recursive_overlap=10),
        default_strategy="recursive"
    )


@pytest.fixture
def ready_session(manager):
    session = manager.create_session()
    manager.process_document(session.session_id, "notes.pdf", b"%PDF-fake")
    return session


class TestSessions:
    """Tests for session lifecycle."""

    def test_create_session(self, manager):
        session = manager.create_session()

        assert session.session_id.startswith("sess_")
        assert session.state == SessionState.INITIAL
        assert session.strategy == ChunkingStrategy.RECURSIVE
        assert session.chunks == ()
        assert session.messages == []

    def test_create_session_with_strategy(self, manager):
        assert manager.create_session("fixed").strategy == ChunkingStrategy.FIXED

    def test_session_ids_unique(self, manager):
        assert manager.create_session().session_id != manager.create_session().session_id

    def test_get_unknown_session(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.get_session("sess_missing")

    def test_delete_session(self, manager):
        session = manager.create_session()
        manager.delete_session(session.session_id)

        with pytest.raises(SessionNotFoundError):
            manager.get_session(session.session_id)


class TestStrategy:
    """Tests for choosing the chunking strategy."""

    def test_set_strategy_before_upload(self, manager):
        session = manager.create_session()
        manager.set_strategy(session.session_id, ChunkingStrategy.FIXED)
        assert manager.get_session(session.session_id).strategy == ChunkingStrategy.FIXED

    def test_set_unknown_strategy(self, manager):
        session = manager.create_session()
        with pytest.raises(UnsupportedStrategyError):
            manager.set_strategy(session.session_id, "semantic")

    def test_strategy_locked_once_ready(self, manager, ready_session):
        with pytest.raises(SessionStateError):
            manager.set_strategy(ready_session.session_id, "fixed")

    def test_strategy_used_for_upload(self, manager, document_loader):
        session = manager.create_session("fixed")
        manager.process_document(session.session_id, "notes.pdf", b"%PDF-fake")

        expected = manager.chunking_engine.chunk_fixed(DOCUMENT_TEXT)
        assert list(session.chunks) == expected


class TestProcessDocument:
    """Tests for document upload handling."""

    def test_ready_after_upload(self, manager, ready_session, document_loader):
        document_loader.extract_text.assert_called_once_with(b"%PDF-fake", "notes.pdf")

        assert ready_session.state == SessionState.READY
        assert ready_session.document_name == "notes.pdf"
        assert ready_session.error is None
        assert [chunk.id for chunk in ready_session.chunks] == [0, 1]
        assert ready_session.chunks[0].text.startswith("Transformers")

    def test_welcome_message(self, ready_session):
        assert len(ready_session.messages) == 1
        message = ready_session.messages[0]
        assert message.author == Author.AI
        assert message.text == (
            'Successfully processed "notes.pdf". I\'m ready to answer your questions.'
        )

    def test_parse_error_resets_session(self, manager, document_loader):
        session = manager.create_session()
        document_loader.extract_text.side_effect = PdfParseError("broken")

        with pytest.raises(PdfParseError):
            manager.process_document(session.session_id, "broken.pdf", b"junk")

        assert session.state == SessionState.INITIAL
        assert session.error == PROCESSING_ERROR_MESSAGE
        assert session.chunks == ()
        assert session.document_name is None

    def test_reupload_replaces_chunks_and_messages(self, manager, ready_session, document_loader):
        manager.ask(ready_session.session_id, "What do transformers use")
        old_chunks = ready_session.chunks

        document_loader.extract_text.return_value = "A single short page."
        manager.process_document(ready_session.session_id, "other.pdf", b"%PDF-other")

        assert ready_session.chunks == (Chunk(id=0, text="A single short page."),)
        assert ready_session.chunks is not old_chunks
        assert ready_session.document_name == "other.pdf"
        assert len(ready_session.messages) == 1

    def test_error_cleared_by_next_upload(self, manager, document_loader):
        session = manager.create_session()
        document_loader.extract_text.side_effect = [PdfParseError("broken"), DOCUMENT_TEXT]

        with pytest.raises(PdfParseError):
            manager.process_document(session.session_id, "broken.pdf", b"junk")
        manager.process_document(session.session_id, "notes.pdf", b"%PDF-fake")

        assert session.error is None
        assert session.state == SessionState.READY

    def test_superseded_upload_is_discarded(self, manager, document_loader):
        session = manager.create_session()
        calls = []

        def extract(data, filename):
            calls.append(filename)
            if filename == "first.pdf":
                # A second upload starts and finishes while the first is still extracting
                manager.process_document(session.session_id, "second.pdf", b"%PDF-2")
                return "Text of the first document."
            return "Text of the second document."

        document_loader.extract_text.side_effect = extract
        manager.process_document(session.session_id, "first.pdf", b"%PDF-1")

        assert calls == ["first.pdf", "second.pdf"]
        assert session.document_name == "second.pdf"
        assert session.chunks == (Chunk(id=0, text="Text of the second document."),)
        assert session.state == SessionState.READY

    def test_unknown_session(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.process_document("sess_missing", "notes.pdf", b"%PDF-fake")


class TestAsk:
    """Tests for answering questions."""

    def test_ask_before_upload(self, manager):
        session = manager.create_session()
        with pytest.raises(SessionStateError):
            manager.ask(session.session_id, "What is this about?")

    def test_ask_blank_question(self, manager, ready_session):
        with pytest.raises(ValueError):
            manager.ask(ready_session.session_id, "   ")

    def test_ask_retrieves_relevant_chunks(self, manager, ready_session, answer_generator):
        result = manager.ask(ready_session.session_id, "What do transformers use")

        answer_generator.answer.assert_called_once_with(
            "What do transformers use", [ready_session.chunks[0], ready_session.chunks[1]]
        )
        assert result.answer == "Self attention."
        assert result.error is False
        assert [(item.chunk.id, item.score) for item in result.sources] == [(0, 2), (1, 1)]
        assert result.latency_ms == 120

    def test_ask_records_messages(self, manager, ready_session):
        manager.ask(ready_session.session_id, "What do transformers use")

        user_message, ai_message = ready_session.messages[1:]
        assert user_message.author == Author.USER
        assert user_message.text == "What do transformers use"
        assert ai_message.author == Author.AI
        assert ai_message.text == "Self attention."
        assert [chunk.id for chunk in ai_message.sources] == [0, 1]

    def test_ask_without_matches_sends_empty_context(self, manager, ready_session, answer_generator):
        result = manager.ask(ready_session.session_id, "Quantum chromodynamics?")

        answer_generator.answer.assert_called_once_with("Quantum chromodynamics?", [])
        assert result.sources == []

    def test_generation_failure_appends_apology(self, manager, ready_session, answer_generator):
        answer_generator.answer.side_effect = GenerationFailedError("down", code="API_ERROR")

        result = manager.ask(ready_session.session_id, "What do transformers use")

        assert result.error is True
        assert result.answer == GENERATION_ERROR_MESSAGE
        assert result.sources == []
        assert ready_session.messages[-1].text == GENERATION_ERROR_MESSAGE
        assert ready_session.messages[-1].sources is None
        assert ready_session.state == SessionState.READY
