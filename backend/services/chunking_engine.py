"""Chunking engine with fixed-size and recursive separator strategies."""
import logging
from typing import Callable, Dict, List, Union

from models.chunk import Chunk, ChunkingStrategy
from config import (
    CHUNK_SIZE_FIXED,
    CHUNK_OVERLAP_FIXED,
    CHUNK_SIZE_RECURSIVE,
    CHUNK_OVERLAP_RECURSIVE,
)

logger = logging.getLogger(__name__)

# Separators for recursive splitting (in priority order)
SEPARATORS = ["\n\n", "\n", ". ", " "]


class UnsupportedStrategyError(ValueError):
    """Raised when the dispatcher receives an unknown chunking strategy."""

    def __init__(self, strategy):
        self.strategy = strategy
        super().__init__(f"Unknown chunking strategy: {strategy!r}")


def parse_strategy(strategy: Union[ChunkingStrategy, str]) -> ChunkingStrategy:
    """
    Coerce a strategy tag to ChunkingStrategy.

    Raises:
        UnsupportedStrategyError: If the tag is not a known strategy
    """
    try:
        return ChunkingStrategy(strategy)
    except ValueError:
        raise UnsupportedStrategyError(strategy) from None


def _windows(text: str, size: int, overlap: int) -> List[str]:
    """Slice text into windows of `size` characters, consecutive windows sharing `overlap`."""
    pieces = []
    step = size - overlap
    start = 0

    while start < len(text):
        end = start + size
        pieces.append(text[start:end])
        # A further window would lie entirely inside this one
        if end >= len(text):
            break
        start += step

    return pieces


class ChunkingEngine:
    """Segments raw document text into ordered, sequentially numbered chunks."""

    def __init__(
        self,
        fixed_size: int = CHUNK_SIZE_FIXED,
        fixed_overlap: int = CHUNK_OVERLAP_FIXED,
        recursive_size: int = CHUNK_SIZE_RECURSIVE,
        recursive_overlap: int = CHUNK_OVERLAP_RECURSIVE,
    ):
        """
        Initialize ChunkingEngine.

        Args:
            fixed_size: Window length in characters for fixed-size chunking
            fixed_overlap: Characters shared by consecutive fixed-size windows
            recursive_size: Target chunk length in characters for recursive chunking
            recursive_overlap: Overlap used when recursive chunking falls back to windows

        Raises:
            ValueError: If an overlap is negative or not smaller than its size
        """
        for name, size, overlap in (
            ("fixed", fixed_size, fixed_overlap),
            ("recursive", recursive_size, recursive_overlap),
        ):
            if size <= 0:
                raise ValueError(f"{name} chunk size must be positive, got {size}")
            if not 0 <= overlap < size:
                raise ValueError(
                    f"{name} chunk overlap must satisfy 0 <= overlap < size, "
                    f"got overlap={overlap}, size={size}"
                )

        self.fixed_size = fixed_size
        self.fixed_overlap = fixed_overlap
        self.recursive_size = recursive_size
        self.recursive_overlap = recursive_overlap

        self._chunkers: Dict[ChunkingStrategy, Callable[[str], List[Chunk]]] = {
            ChunkingStrategy.FIXED: self.chunk_fixed,
            ChunkingStrategy.RECURSIVE: self.chunk_recursive,
        }

    def chunk(self, text: str, strategy: Union[ChunkingStrategy, str]) -> List[Chunk]:
        """
        Chunk text with the selected strategy.

        Args:
            text: Raw document text
            strategy: ChunkingStrategy member or its string value

        Returns:
            Chunks in document order with ids 0..n-1

        Raises:
            UnsupportedStrategyError: If the strategy is not recognized
        """
        strategy = parse_strategy(strategy)
        chunks = self._chunkers[strategy](text)
        logger.info(
            f"Created {len(chunks)} chunks from {len(text)} characters "
            f"(strategy={strategy.value})"
        )
        return chunks

    def chunk_fixed(self, text: str) -> List[Chunk]:
        """Split text into overlapping windows of `fixed_size` characters."""
        pieces = _windows(text, self.fixed_size, self.fixed_overlap)
        return [Chunk(id=idx, text=piece) for idx, piece in enumerate(pieces)]

    def chunk_recursive(self, text: str) -> List[Chunk]:
        """
        Split text at the most significant separator that keeps pieces under
        `recursive_size`, falling back to fixed windows for unsplittable runs.

        Whitespace-only pieces are dropped before ids are assigned.
        """
        pieces = [piece for piece in self._split(text, 0) if piece.strip()]
        return [Chunk(id=idx, text=piece) for idx, piece in enumerate(pieces)]

    def _split(self, text: str, separator_index: int) -> List[str]:
        """
        Recursively split text using separators.

        Args:
            text: Text to split
            separator_index: Position in SEPARATORS to split on

        Returns:
            List of text pieces in document order
        """
        if len(text) <= self.recursive_size:
            return [text]

        if separator_index >= len(SEPARATORS):
            return _windows(text, self.recursive_size, self.recursive_overlap)

        separator = SEPARATORS[separator_index]
        result = []
        current_chunk = ""

        for part in text.split(separator):
            if len(current_chunk) + len(part) + len(separator) > self.recursive_size:
                if current_chunk:
                    result.extend(self._split(current_chunk, separator_index + 1))
                current_chunk = part
            elif current_chunk:
                current_chunk = current_chunk + separator + part
            else:
                current_chunk = part

        if current_chunk:
            result.extend(self._split(current_chunk, separator_index + 1))

        return result
