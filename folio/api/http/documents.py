from fastapi import APIRouter, Depends

from folio.core.auth import require_admin
from folio.domains.documents.codec import parse, serialize
from folio.domains.documents.entities import StructuredDocument
from folio.domains.documents.schemas import DocumentPayload, DocumentText

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/parse", response_model=DocumentPayload)
async def parse_document(data: DocumentText, _: bool = Depends(require_admin)):
    """Split raw text into preamble and body"""
    document = parse(data.text)
    return DocumentPayload(preamble=document.preamble, body=document.body)


@router.post("/serialize", response_model=DocumentText)
async def serialize_document(data: DocumentPayload, _: bool = Depends(require_admin)):
    """Join preamble and body into the stored text form"""
    return DocumentText(text=serialize(StructuredDocument(preamble=data.preamble, body=data.body)))
