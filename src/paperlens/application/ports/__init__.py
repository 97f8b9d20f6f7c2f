"""Application ports (interfaces) used by the application layer."""

from .doi_resolver_port import DoiResolverPort
from .paper_repository_port import PaperRepository
from .paper_source_port import PaperSourcePort
from .text_generator_port import TextGeneratorPort

__all__ = [
    "DoiResolverPort",
    "PaperRepository",
    "PaperSourcePort",
    "TextGeneratorPort",
]
