"""Chunk data models."""
from dataclasses import dataclass
from enum import Enum


class ChunkingStrategy(str, Enum):
    """Algorithm used to split document text into chunks."""
    FIXED = "fixed"
    RECURSIVE = "recursive"


@dataclass(frozen=True)
class Chunk:
    """Represents a document chunk for retrieval."""
    id: int  # Position in the output of one chunking run, starting at 0
    text: str

    @property
    def char_count(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class ScoredChunk:
    """Chunk with its word-overlap score from retrieval."""
    chunk: Chunk
    score: int  # Number of query words found in the chunk
