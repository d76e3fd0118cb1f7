"""
資料模型模組
"""

from models.schemas import (
    QueryEntry,
    QuerySummary,
    ParameterAnalysis,
    QueryAnalysis,
    UploadedFile,
)

__all__ = ['QueryEntry', 'QuerySummary', 'ParameterAnalysis', 'QueryAnalysis', 'UploadedFile']
