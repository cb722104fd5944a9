"""Configuration management for the PDF RAG Chatbot."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")

# Model Configuration
GENERATION_MODEL = os.getenv("GENERATION_MODEL", "llama-3.1-8b-instant")
MAX_OUTPUT_TOKENS = int(os.getenv("MAX_OUTPUT_TOKENS", "500"))
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))

# Chunking Configuration (characters)
CHUNK_SIZE_FIXED = int(os.getenv("CHUNK_SIZE_FIXED", "1000"))
CHUNK_OVERLAP_FIXED = int(os.getenv("CHUNK_OVERLAP_FIXED", "100"))
CHUNK_SIZE_RECURSIVE = int(os.getenv("CHUNK_SIZE_RECURSIVE", "1000"))
CHUNK_OVERLAP_RECURSIVE = int(os.getenv("CHUNK_OVERLAP_RECURSIVE", "200"))
DEFAULT_CHUNKING_STRATEGY = os.getenv("DEFAULT_CHUNKING_STRATEGY", "recursive")

# Retrieval Configuration
MAX_CHUNKS = 5
MIN_QUERY_TOKEN_LENGTH = 3  # shorter query words carry no signal

# Upload Configuration
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024)))
