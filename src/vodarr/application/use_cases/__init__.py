from .detail import DetailUseCase
from .search import (
    FederatedSearchUseCase,
    GroupedSearchOutcome,
    SearchOutcome,
    SearchRequest,
)
from .source_admin import SourceAdminUseCase

__all__ = [
    "DetailUseCase",
    "FederatedSearchUseCase",
    "GroupedSearchOutcome",
    "SearchOutcome",
    "SearchRequest",
    "SourceAdminUseCase",
]
