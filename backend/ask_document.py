"""
Command-line question answering over a single PDF.

This script:
1. Extracts the text of a PDF
2. Chunks it with the chosen strategy
3. Answers each question from the most relevant chunks

Usage:
    python ask_document.py paper.pdf --question "What dataset was used?"
    python ask_document.py paper.pdf --strategy fixed --chunks-only
"""
import argparse
import logging
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from config import LOG_LEVEL
from logger import setup_logging
from models.chunk import ChunkingStrategy
from services.answer_generator import AnswerGenerator, GenerationFailedError
from services.chunking_engine import ChunkingEngine
from services.document_loader import DocumentLoader, PdfParseError
from services.llm_client import LLMClient
from services.retrieval_engine import RetrievalEngine

logger = logging.getLogger(__name__)


def main() -> int:
    """Main entry point for the command-line tool."""
    parser = argparse.ArgumentParser(
        description="Ask questions about a PDF using keyword retrieval and an LLM"
    )
    parser.add_argument("pdf", help="Path to the PDF file")
    parser.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in ChunkingStrategy],
        default=ChunkingStrategy.RECURSIVE.value,
        help="Chunking strategy (default: recursive)"
    )
    parser.add_argument(
        "--question", "-q",
        action="append",
        default=[],
        help="Question to answer; repeat for several"
    )
    parser.add_argument(
        "--chunks-only",
        action="store_true",
        help="Print chunk statistics and exit without calling the LLM"
    )

    args = parser.parse_args()
    setup_logging(LOG_LEVEL)

    try:
        document = DocumentLoader().load_file(args.pdf)
    except PdfParseError as e:
        print(f"Failed to process PDF: {e}")
        return 1

    chunks = ChunkingEngine().chunk(document.text, args.strategy)
    print(f"{document.filename}: {document.total_pages} pages, {len(chunks)} chunks ({args.strategy})")

    if args.chunks_only or not args.question:
        for chunk in chunks[:5]:
            preview = chunk.text[:80].replace("\n", " ")
            print(f"  [{chunk.id}] {len(chunk.text)} chars: {preview}")
        return 0

    retrieval_engine = RetrievalEngine()
    answer_generator = AnswerGenerator(LLMClient())
    exit_code = 0

    for question in args.question:
        relevant = retrieval_engine.retrieve(question, chunks)
        print()
        print(f"Q: {question}")
        try:
            answer = answer_generator.answer(question, relevant)
        except GenerationFailedError as e:
            print(f"A: (generation failed: {e.code}) {e}")
            exit_code = 1
            continue

        print(f"A: {answer.text}")
        print(f"   sources: {[chunk.id for chunk in answer.sources] or 'none'}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
