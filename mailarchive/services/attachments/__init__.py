"""Attachment extraction and persistence."""

from .extractor import AttachmentExtractor, ExtractionResult, recover_filename

__all__ = ["AttachmentExtractor", "ExtractionResult", "recover_filename"]
