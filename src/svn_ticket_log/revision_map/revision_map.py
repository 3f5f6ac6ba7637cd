"""리비전 맵 모듈

SVN 리비전 번호와 Git 커밋 사이의 양방향 대응을 구성합니다.
리비전 -> 커밋 대응은 항상 단사이며, 같은 리비전을 주장하는 커밋이 여럿이면
위상 순서상 나중 커밋을 남기고 충돌을 기록합니다.
"""

import logging
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

if TYPE_CHECKING:
    from svn_ticket_log.commit_graph.commit_record import CommitRecord
from .rev_map_codec import decode_entries, encode_rev_map, encode_url_table
from .revision_entry import RevisionCollision, RevisionMapEntry

logger = logging.getLogger(__name__)


class RevisionMap:
    """SVN 리비전 <-> 커밋 대응표"""

    def __init__(self, entries: Iterable[RevisionMapEntry] = (),
                 collisions: Sequence[RevisionCollision] = ()):
        self._by_revision: Dict[int, RevisionMapEntry] = {}
        for entry in entries:
            if entry.svn_revision in self._by_revision:
                raise ValueError(f"Duplicate SVN revision in revision map: r{entry.svn_revision}")
            self._by_revision[entry.svn_revision] = entry
        self._by_commit: Dict[str, RevisionMapEntry] = {
            entry.commit_id: entry for entry in self._by_revision.values()
        }
        self._collisions = list(collisions)

    def __len__(self) -> int:
        return len(self._by_revision)

    def __iter__(self) -> Iterator[RevisionMapEntry]:
        return iter(self.entries())

    def __contains__(self, svn_revision: int) -> bool:
        return svn_revision in self._by_revision

    def __eq__(self, other) -> bool:
        if not isinstance(other, RevisionMap):
            return NotImplemented
        return self._by_revision == other._by_revision

    def __repr__(self) -> str:
        return f"RevisionMap(entries={len(self)}, collisions={len(self._collisions)})"

    def entries(self, descending: bool = False) -> List[RevisionMapEntry]:
        """리비전 순으로 정렬된 엔트리 (기본 오름차순)"""
        return [self._by_revision[revision] for revision in sorted(self._by_revision, reverse=descending)]

    def get(self, svn_revision: int) -> Optional[RevisionMapEntry]:
        return self._by_revision.get(svn_revision)

    def commit_for(self, svn_revision: int) -> Optional[str]:
        entry = self._by_revision.get(svn_revision)
        return entry.commit_id if entry else None

    def revision_for(self, commit_id: str) -> Optional[int]:
        entry = self._by_commit.get(commit_id.lower())
        return entry.svn_revision if entry else None

    def to_commit_map(self) -> Dict[int, str]:
        return {revision: entry.commit_id for revision, entry in self._by_revision.items()}

    @property
    def collisions(self) -> List[RevisionCollision]:
        return list(self._collisions)

    def to_bytes(self) -> bytes:
        """git-svn .rev_map 형식 바이트"""
        return encode_rev_map(self._by_revision.values())

    def url_table_bytes(self) -> bytes:
        return encode_url_table(self._by_revision.values())

    @classmethod
    def from_bytes(cls, rev_map: bytes, url_table: Optional[bytes] = None) -> 'RevisionMap':
        """바이너리 표현에서 리비전 맵 복원

        Raises:
            ValueError: 데이터가 손상되었거나 같은 리비전이 두 번 나오는 경우
        """
        return cls(decode_entries(rev_map, url_table))

    def to_dict(self):
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {
            'entries': [entry.to_dict() for entry in self.entries()],
            'collisions': [collision.to_dict() for collision in self._collisions],
        }


def build_revision_map(records: Iterable['CommitRecord'],
                       topo_positions: Optional[Mapping[str, int]] = None) -> RevisionMap:
    """커밋 집합에서 리비전 맵 생성

    Args:
        records: 커밋 레코드 (SVN 정보가 없는 커밋은 무시)
        topo_positions: 커밋 식별자 -> 위상 순서 (없으면 레코드의 topo_position 사용)

    Returns:
        RevisionMap: 충돌 기록을 포함한 단사 리비전 맵
    """
    def position_of(record: 'CommitRecord') -> int:
        if topo_positions is not None:
            return topo_positions.get(record.id, -1)
        return record.topo_position

    candidates = [record for record in records if record.svn_info is not None]
    # 위상 순서대로 처리하면 나중 커밋이 항상 앞선 커밋을 대체함
    candidates.sort(key=lambda record: (position_of(record), record.id))

    entries: Dict[int, RevisionMapEntry] = {}
    collisions: List[RevisionCollision] = []
    for record in candidates:
        svn_info = record.svn_info
        previous = entries.get(svn_info.revision)
        if previous is not None and previous.commit_id != record.id:
            collision = RevisionCollision(
                svn_revision=svn_info.revision,
                kept_commit_id=record.id,
                dropped_commit_id=previous.commit_id,
            )
            collisions.append(collision)
            logger.warning(collision.describe())
        entries[svn_info.revision] = RevisionMapEntry(
            svn_revision=svn_info.revision,
            commit_id=record.id,
            svn_url=svn_info.url,
        )

    logger.debug(f"리비전 맵 생성 완료: {len(entries)}개 리비전, 충돌 {len(collisions)}건")
    return RevisionMap(entries.values(), collisions)
