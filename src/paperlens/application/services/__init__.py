from paperlens.application.services.library_service import LibraryService
from paperlens.application.services.paper_search_service import PaperSearchService
from paperlens.application.services.summary_service import SummaryGenerator, SummaryService

__all__ = [
    "LibraryService",
    "PaperSearchService",
    "SummaryGenerator",
    "SummaryService",
]
