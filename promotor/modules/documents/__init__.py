"""Documents module: stored files, AI scanning and auto-association."""

from .matching import auto_associate, find_best_match
from .models import Document, DocumentStatus, DocumentType, LinkedEntityType
from .scanner import DocumentScanner, fallback_analysis, is_analyzable, parse_analysis
from .schemas import DocumentAnalysis, DocumentResponse, EntityRef, ProcessResult, ScanResult
from .service import DOCUMENT_CSV_HEADERS, DocumentService
from .storage import LocalFileStore, UploadedFile, get_file_store, read_upload

__all__ = [
    "DOCUMENT_CSV_HEADERS",
    "Document",
    "DocumentAnalysis",
    "DocumentResponse",
    "DocumentScanner",
    "DocumentService",
    "DocumentStatus",
    "DocumentType",
    "EntityRef",
    "LinkedEntityType",
    "LocalFileStore",
    "ProcessResult",
    "ScanResult",
    "UploadedFile",
    "auto_associate",
    "fallback_analysis",
    "find_best_match",
    "get_file_store",
    "is_analyzable",
    "parse_analysis",
    "read_upload",
]
