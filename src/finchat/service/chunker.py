"""Character-window text chunker with exact overlap between neighbours."""

from finchat.constants import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE
from finchat.exceptions import ValidationError

# Preferred cut points, strongest first
SEPARATORS = ("\n\n", "\n", " ")


def _find_cut(text: str, start: int, end: int, overlap: int) -> int:
    """Pick where a non-final window should end.

    Returns the position just after the last separator inside the window that
    still leaves the window longer than the overlap, or ``end`` when the window
    has no usable separator.
    """
    for sep in SEPARATORS:
        idx = text.rfind(sep, start, end)
        if idx != -1 and idx + len(sep) > start + overlap:
            return idx + len(sep)
    return end


def split(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[str]:
    """Split text into overlapping windows of at most chunk_size characters.

    Each window that does not reach the end of the text is cut after the last
    paragraph break, line break or space it contains (falling back to a hard
    cut at chunk_size). The next window starts ``overlap`` characters before
    that cut, so the trailing ``overlap`` characters of every chunk equal the
    leading ``overlap`` characters of the next one. Only the final chunk may be
    shorter than the others for reasons other than a soft cut.

    Args:
        text: The text to chunk
        chunk_size: Maximum characters per chunk (default: 1000)
        overlap: Characters shared by neighbouring chunks (default: 200)

    Returns:
        list[str]: Chunks in document order; empty for empty text

    Raises:
        ValidationError: Unless chunk_size > overlap >= 0
    """
    if overlap < 0 or chunk_size <= overlap:
        raise ValidationError(
            f"Invalid chunking parameters: chunk_size={chunk_size}, overlap={overlap}"
        )

    chunks: list[str] = []
    start = 0
    length = len(text)

    while start < length:
        end = start + chunk_size
        if end >= length:
            chunks.append(text[start:])
            break

        cut = _find_cut(text, start, end, overlap)
        chunks.append(text[start:cut])
        start = cut - overlap

    return chunks
