"""PaperLens - multi-source research paper discovery backend."""

__version__ = "0.1.0"
