"""Retrieval engine ranking chunks by query word overlap."""
import logging
from typing import List, Sequence, Set

from models.chunk import Chunk, ScoredChunk
from config import MAX_CHUNKS, MIN_QUERY_TOKEN_LENGTH

logger = logging.getLogger(__name__)


def tokenize(text: str, min_length: int = 0) -> Set[str]:
    """Lowercase, split on whitespace runs and keep words of at least `min_length` characters."""
    return {word for word in text.lower().split() if len(word) >= min_length}


class RetrievalEngine:
    """Select the chunks that share the most words with a query."""

    def __init__(self, top_k: int = MAX_CHUNKS, min_token_length: int = MIN_QUERY_TOKEN_LENGTH):
        """
        Initialize the retrieval engine.

        Args:
            top_k: Maximum number of chunks returned per query
            min_token_length: Query words shorter than this are ignored
        """
        self.top_k = top_k
        self.min_token_length = min_token_length

    def score_chunks(self, query: str, chunks: Sequence[Chunk]) -> List[ScoredChunk]:
        """
        Score every chunk against the query, best first.

        The score is the number of distinct query words that also occur in the
        chunk. Chunks with equal scores keep their input order.

        Args:
            query: User question
            chunks: Chunks of the current document

        Returns:
            One ScoredChunk per input chunk, sorted by descending score;
            empty if the query has no usable words
        """
        query_words = tokenize(query, self.min_token_length)
        if not query_words:
            logger.debug("Query has no words long enough to match, skipping scoring")
            return []

        scored = [
            ScoredChunk(chunk=chunk, score=len(query_words & tokenize(chunk.text)))
            for chunk in chunks
        ]
        # sorted() is stable, so ties keep document order
        return sorted(scored, key=lambda item: item.score, reverse=True)

    def retrieve_scored(self, query: str, chunks: Sequence[Chunk]) -> List[ScoredChunk]:
        """Top `top_k` chunks with a positive score, best first."""
        top = self.score_chunks(query, chunks)[:self.top_k]
        relevant = [item for item in top if item.score > 0]

        logger.info(
            f"Retrieved {len(relevant)} of {len(chunks)} chunks "
            f"(top score: {relevant[0].score if relevant else 0})"
        )
        return relevant

    def retrieve(self, query: str, chunks: Sequence[Chunk]) -> List[Chunk]:
        """
        Retrieve the chunks most relevant to the query.

        Args:
            query: User question
            chunks: Chunks of the current document

        Returns:
            At most `top_k` chunks, highest overlap first, never one with no overlap
        """
        return [item.chunk for item in self.retrieve_scored(query, chunks)]
