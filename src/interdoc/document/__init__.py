"""In-memory document model."""

from interdoc.document.models import Block, Document, Paragraph, ParagraphStyle, Run

__all__ = ["Block", "Document", "Paragraph", "ParagraphStyle", "Run"]
