from folio.domains.search.services import SearchHit, SearchService

__all__ = [
    "SearchHit",
    "SearchService",
]
