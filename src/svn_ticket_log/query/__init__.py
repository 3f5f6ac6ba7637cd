"""질의 패키지

커밋 그래프에 대한 list / compare / search 질의와 결과 모델을 제공합니다.
"""

from .query_engine import QueryEngine, RefTip, group_by_ticket
from .results import (
    CompareResult,
    IncludedCommit,
    ListResult,
    RefGroup,
    SearchReport,
    SearchResult,
    TicketGroup,
)

__all__ = [
    'QueryEngine',
    'RefTip',
    'group_by_ticket',
    'CompareResult',
    'IncludedCommit',
    'ListResult',
    'RefGroup',
    'SearchReport',
    'SearchResult',
    'TicketGroup',
]
