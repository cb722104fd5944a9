"""Services for the PDF RAG Chatbot."""
from .document_loader import DocumentLoader, PdfParseError
from .chunking_engine import ChunkingEngine, UnsupportedStrategyError, parse_strategy
from .retrieval_engine import RetrievalEngine
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .answer_generator import Answer, AnswerGenerator, GenerationFailedError
from .session_manager import QueryResult, SessionManager, SessionNotFoundError, SessionStateError

__all__ = ['DocumentLoader', 'PdfParseError', 'ChunkingEngine', 'UnsupportedStrategyError', 'parse_strategy', 'RetrievalEngine', 'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'Answer', 'AnswerGenerator', 'GenerationFailedError', 'QueryResult', 'SessionManager', 'SessionNotFoundError', 'SessionStateError']
