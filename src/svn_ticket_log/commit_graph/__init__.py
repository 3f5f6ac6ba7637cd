"""커밋 그래프 패키지

git-svn 변환 저장소의 커밋을 불변 레코드로 만들고
SVN 정보 추출, 커밋 분류, 티켓 해석을 수행합니다.
"""

from .commit_kind import CommitKind
from .raw_commit import RawCommit
from .svn_info import SvnInfo, extract_svn_info
from .ticket_id import TicketId
from .ticket_pattern import TicketMatcher, build_ticket_regex, format_ticket
from .references import ReferencedCommits, extract_references
from .commit_record import CommitRecord
from .commit_classifier import CommitClassifier, DEFAULT_RULES, classify, is_likely_merge
from .commit_index import CommitIndex, UnresolvedReference
from .ticket_resolver import TicketResolver
from .log_parser import LOG_PRETTY_FORMAT, parse_commit_id_list, parse_log_output
from .commit_graph import CommitGraph, compute_topological_positions

__all__ = [
    'CommitKind',
    'RawCommit',
    'SvnInfo',
    'extract_svn_info',
    'TicketId',
    'TicketMatcher',
    'build_ticket_regex',
    'format_ticket',
    'ReferencedCommits',
    'extract_references',
    'CommitRecord',
    'CommitClassifier',
    'DEFAULT_RULES',
    'classify',
    'is_likely_merge',
    'CommitIndex',
    'UnresolvedReference',
    'TicketResolver',
    'LOG_PRETTY_FORMAT',
    'parse_commit_id_list',
    'parse_log_output',
    'CommitGraph',
    'compute_topological_positions',
]
