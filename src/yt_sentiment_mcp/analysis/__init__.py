"""Map-reduce comment analysis core.

Public API:
    CommentAnalyzer — chunk → rate-limited dispatch → aggregate → reduce.
    sanitize_analysis() — strict extraction of the final report JSON.
"""

from .chunking import chunk_comments
from .orchestrator import CommentAnalyzer
from .sanitizer import FinalizedAnalysis, sanitize_analysis

__all__ = ["CommentAnalyzer", "FinalizedAnalysis", "chunk_comments", "sanitize_analysis"]
