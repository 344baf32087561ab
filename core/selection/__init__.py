from core.selection.service import SelectionService
from core.selection.locks import PathLockRegistry, path_locks
from core.selection.models import (
    PathSelectionResult,
    SelectionResult,
    RankingEntry,
    RankingPage,
    PathRankingStats,
)

__all__ = [
    'SelectionService',
    'PathLockRegistry',
    'path_locks',
    'PathSelectionResult',
    'SelectionResult',
    'RankingEntry',
    'RankingPage',
    'PathRankingStats',
]
