from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from folio.core.db import get_db
from folio.domains.search.services import SearchHit, SearchService

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=List[SearchHit])
async def search_docs(q: str = Query("", max_length=200), db: AsyncSession = Depends(get_db)):
    """Search visible documentation pages"""
    return await SearchService(db).search_docs(q)
