from folio.domains.documents.entities import StructuredDocument
from folio.domains.documents.codec import parse, serialize
from folio.domains.documents.interpolation import interpolate
from folio.domains.documents.schemas import DocumentText, DocumentPayload

__all__ = [
    "StructuredDocument",
    "parse", "serialize",
    "interpolate",
    "DocumentText", "DocumentPayload",
]
