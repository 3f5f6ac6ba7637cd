from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Any, FrozenSet, List, Optional, Tuple

from .commit_kind import CommitKind
from .raw_commit import RawCommit
from .references import ReferencedCommits
from .svn_info import SvnInfo, extract_svn_info
from .ticket_id import TicketId


@dataclass(frozen=True)
class CommitRecord:
    """개별 커밋과 파생 정보

    생성 후에는 변경되지 않습니다. 파생 정보(분류, 티켓 등)는
    CommitGraph가 한 번 계산하여 새 레코드로 교체합니다.
    """
    id: str
    parent_ids: Tuple[str, ...]
    author: str
    timestamp: Optional[datetime]
    summary: str
    full_message: str
    changed_paths: Tuple[str, ...] = field(default_factory=tuple)

    # 파생 정보
    svn_info: Optional[SvnInfo] = None
    references: ReferencedCommits = field(default_factory=ReferencedCommits)
    kind: CommitKind = CommitKind.PLAIN
    is_likely_merge: bool = False
    direct_tickets: FrozenSet[TicketId] = frozenset()
    tickets: FrozenSet[TicketId] = frozenset()
    topo_position: int = -1

    @classmethod
    def from_raw(cls, raw: RawCommit) -> 'CommitRecord':
        """원본 데이터에서 레코드 생성 (식별자는 소문자로 정규화, SVN 정보는 메시지만으로 결정됨)"""
        return cls(
            id=raw.id.lower(),
            parent_ids=tuple(parent_id.lower() for parent_id in raw.parent_ids),
            author=raw.author,
            timestamp=raw.timestamp,
            summary=raw.summary,
            full_message=raw.full_message,
            changed_paths=tuple(raw.changed_paths),
            svn_info=extract_svn_info(raw.full_message),
        )

    def annotated(self, **derived) -> 'CommitRecord':
        """파생 정보를 채운 새 레코드 반환 (불변성 유지)"""
        return replace(self, **derived)

    @property
    def is_merge_commit(self) -> bool:
        """부모가 둘 이상인 구조적 머지 커밋 여부"""
        return len(self.parent_ids) > 1

    @property
    def svn_revision(self) -> Optional[int]:
        return self.svn_info.revision if self.svn_info else None

    def short_id(self, length: int = 10) -> str:
        return self.id[:length]

    def sorted_tickets(self) -> List[TicketId]:
        return sorted(self.tickets)

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'id': self.id,
            'parent_ids': list(self.parent_ids),
            'author': self.author,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'summary': self.summary,
            'changed_paths': list(self.changed_paths),
            'svn_info': self.svn_info.to_dict() if self.svn_info else None,
            'kind': self.kind.value,
            'is_likely_merge': self.is_likely_merge,
            'tickets': [ticket.value for ticket in self.sorted_tickets()],
        }
