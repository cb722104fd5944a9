"""Answer generation grounded in retrieved document chunks."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from models.chunk import Chunk
from services.llm_client import LLMClient, LLMClientError
from config import GENERATION_MODEL, MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)

CONTEXT_DELIMITER = "\n---\n"
NOT_FOUND_ANSWER = "I couldn't find an answer in the provided document."

PROMPT_TEMPLATE = """Based strictly on the following context, please provide a concise and accurate answer to the question. If the answer cannot be found in the context, state "{not_found}" Do not use any outside knowledge.

Context:
---
{context}
---

Question: {query}

Answer:"""


@dataclass
class Answer:
    """Generated answer together with the chunks it was grounded on."""
    text: str
    sources: List[Chunk] = field(default_factory=list)
    latency_ms: Optional[int] = None
    model_used: Optional[str] = None


class GenerationFailedError(Exception):
    """Raised when the text-generation collaborator could not produce an answer."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR"):
        self.code = code
        super().__init__(message)


def build_context(chunks: Sequence[Chunk]) -> str:
    """Join chunk texts into a single context block."""
    return CONTEXT_DELIMITER.join(chunk.text for chunk in chunks)


def build_prompt(query: str, context: str) -> str:
    """Fill the grounded-answer prompt template."""
    return PROMPT_TEMPLATE.format(not_found=NOT_FOUND_ANSWER, context=context, query=query)


class AnswerGenerator:
    """Composes retrieved context into a prompt and delegates generation to the LLM."""

    def __init__(
        self,
        llm_client: LLMClient,
        model: str = GENERATION_MODEL,
        max_tokens: int = MAX_OUTPUT_TOKENS
    ):
        self.llm_client = llm_client
        self.model = model
        self.max_tokens = max_tokens

    def answer(self, query: str, relevant_chunks: Sequence[Chunk]) -> Answer:
        """
        Generate an answer to the query from the relevant chunks.

        Args:
            query: User question
            relevant_chunks: Chunks selected by retrieval, best first

        Returns:
            Answer with the generated text (verbatim) and the chunks as sources

        Raises:
            GenerationFailedError: If the generation call fails for any reason
        """
        prompt = build_prompt(query, build_context(relevant_chunks))

        try:
            response = self.llm_client.generate(
                prompt=prompt,
                model=self.model,
                max_tokens=self.max_tokens
            )
        except LLMClientError as e:
            raise GenerationFailedError(e.error.message, code=e.error.code) from e
        except Exception as e:
            logger.error(f"Unexpected error from generation client: {e}", exc_info=True)
            raise GenerationFailedError(f"Failed to get a response from the AI model: {e}") from e

        logger.info(
            f"Answered query with {len(relevant_chunks)} context chunks "
            f"in {response.latency_ms}ms"
        )
        return Answer(
            text=response.text,
            sources=list(relevant_chunks),
            latency_ms=response.latency_ms,
            model_used=response.model_used
        )
