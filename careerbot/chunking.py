"""
Profile Chunking Module

WHY CHUNKING IS NECESSARY:
1. Embeddings work better on focused, coherent text
2. Retrieval is more precise with smaller, specific chunks
3. Only a few passages fit in the chat prompt next to the question

THE STRATEGY WE USE (sentence accumulation):
- Split the corpus on sentence-ending punctuation (. ! ?)
- Greedily append sentences to a buffer until the next one would push
  it past chunk_size characters
- Close the buffer, then start the next one with the buffer's last words

WHY WORD OVERLAP:
A profile line like "Led the payments team. Shipped the new checkout."
split across two chunks would lose "the payments team" context in the
second one. Carrying the tail words forward keeps some shared text.
The overlap is given in characters but applied in words, assuming
about 5 characters per word: overlap=200 keeps the last 40 words.

WHAT WE DON'T DO:
- Sentences are never cut in half. A single sentence longer than
  chunk_size becomes its own oversized chunk.
"""

import re
from dataclasses import dataclass
from typing import List
from pathlib import Path

# Document loaders
import PyPDF2


SENTENCE_BOUNDARY = re.compile(r"[.!?]+")

# Approximate characters per word used to turn the overlap into a word count
CHARS_PER_WORD = 5


@dataclass
class Chunk:
    """
    A piece of the profile corpus.

    - id: position in the overall chunk sequence (ingestion order)
    - text: the trimmed chunk text, never empty
    """
    id: int
    text: str

    def __repr__(self):
        preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        return f"Chunk(id={self.id}, text='{preview}')"


class DocumentLoader:
    """
    Load a profile document from disk.

    WHY A SEPARATE CLASS:
    - Single responsibility: only handles file I/O
    - The profile can come from a CSV export (see profile_extractor)
      or from a single exported file handled here
    """

    @staticmethod
    def load(file_path: str) -> tuple[str, dict]:
        """
        Load a document and return (text, metadata).

        Returns:
            tuple: (document_text, metadata_dict)
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        suffix = path.suffix.lower()

        if suffix in (".txt", ".md"):
            return DocumentLoader._load_txt(path)
        elif suffix == ".pdf":
            return DocumentLoader._load_pdf(path)
        else:
            raise ValueError(f"Unsupported file format: {suffix}")

    @staticmethod
    def _load_txt(path: Path) -> tuple[str, dict]:
        """Load a text file."""
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        return text, {"source": str(path), "format": path.suffix.lower().lstrip(".")}

    @staticmethod
    def _load_pdf(path: Path) -> tuple[str, dict]:
        """
        Load a PDF file, e.g. the "Save to PDF" export of a profile page.

        Pages are joined with blank lines.
        """
        text_parts = []

        with open(path, "rb") as f:
            reader = PyPDF2.PdfReader(f)
            page_count = len(reader.pages)

            for page in reader.pages:
                text_parts.append(page.extract_text() or "")

        return "\n\n".join(text_parts), {
            "source": str(path),
            "format": "pdf",
            "page_count": page_count
        }


def split_into_chunks(
    text: str,
    chunk_size: int = 1000,
    overlap: int = 200
) -> List[str]:
    """
    Split text into overlapping, sentence-aligned chunks.

    Args:
        text: The full corpus text
        chunk_size: Character count above which the buffer is closed
        overlap: Overlap budget in characters, applied as overlap // 5 words

    Returns:
        List of trimmed chunk strings, in corpus order

    HOW IT WORKS:
    1. Split on runs of . ! ? and drop blank fragments
    2. If buffer + sentence would exceed chunk_size and the buffer is not
       empty, emit the trimmed buffer and start a new one from its tail
       words followed by the sentence
    3. Otherwise append the sentence with a separating space
    4. Emit whatever is left at the end

    The same input and parameters always give the same chunks.
    """
    sentences = [s for s in SENTENCE_BOUNDARY.split(text) if s.strip()]
    overlap_words = overlap // CHARS_PER_WORD

    chunks = []
    current = ""

    for sentence in sentences:
        if len(current + sentence) > chunk_size and len(current) > 0:
            chunks.append(current.strip())

            # Keep the tail of the closed chunk as context for the next one
            tail = current.split(" ")[-overlap_words:] if overlap_words > 0 else []
            current = " ".join(tail) + " " + sentence
        else:
            current += " " + sentence

    if current.strip():
        chunks.append(current.strip())

    return chunks


class SentenceChunker:
    """
    Turn corpus text into Chunk objects with stable ids.

    USAGE:
        chunker = SentenceChunker(chunk_size=1000, chunk_overlap=200)
        chunks = chunker.chunk_text(profile_text)
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0:
            raise ValueError("chunk_overlap must not be negative")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split(self, text: str) -> List[str]:
        return split_into_chunks(text, self.chunk_size, self.chunk_overlap)

    def chunk_text(self, text: str) -> List[Chunk]:
        """
        Split text and number the pieces.

        The id of a chunk is its position in the sequence, so the same
        corpus always maps to the same ids.
        """
        return [
            Chunk(id=i, text=chunk_text)
            for i, chunk_text in enumerate(self.split(text))
        ]


def chunk_document(
    file_path: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 200
) -> List[Chunk]:
    """
    Convenience function to load and chunk a document.

    Example:
        chunks = chunk_document("Profile.pdf")
        for chunk in chunks:
            print(f"Chunk {chunk.id}: {chunk.text[:100]}...")
    """
    text, _ = DocumentLoader.load(file_path)

    chunker = SentenceChunker(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap
    )

    return chunker.chunk_text(text)
