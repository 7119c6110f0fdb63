from .documents import Document, DocumentStore, LocalDocument, LocalDocumentStore, read_document_bytes

__all__ = ["Document", "DocumentStore", "LocalDocument", "LocalDocumentStore", "read_document_bytes"]
