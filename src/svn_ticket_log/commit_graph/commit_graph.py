"""커밋 그래프 모듈

원본 커밋 목록을 주석이 달린 불변 레코드 집합으로 만드는 파이프라인과
부모 링크를 따라가는 도달 가능성 탐색을 제공합니다.

구성 순서:
    1. 티켓 패턴 컴파일 (잘못된 설정은 즉시 실패)
    2. 레코드 생성 및 SVN 정보 추출
    3. 위상 순서 계산
    4. 리비전 맵 생성 (단사, 충돌 기록)
    5. 커밋 참조 추출 및 인덱스 연결
    6. 커밋 분류
    7. 티켓 해석
"""

import logging
from collections import deque
from typing import Dict, FrozenSet, Iterable, List, Optional

from svn_ticket_log.config.settings import LogMiningConfig, get_default_config
from svn_ticket_log.exceptions import UnknownCommitError
from svn_ticket_log.revision_map.revision_entry import RevisionCollision
from svn_ticket_log.revision_map.revision_map import RevisionMap, build_revision_map
from .commit_classifier import CommitClassifier, is_likely_merge
from .commit_index import CommitIndex, UnresolvedReference
from .commit_record import CommitRecord
from .raw_commit import RawCommit
from .references import ReferencedCommits, extract_references
from .ticket_id import TicketId
from .ticket_pattern import TicketMatcher
from .ticket_resolver import TicketResolver


def compute_topological_positions(records: List[CommitRecord]) -> Dict[str, int]:
    """부모가 자식보다 앞서는 위상 순서

    서로 관계없는 커밋은 입력 순서의 역순(git log 는 최신순이므로 오래된 순)을 따릅니다.
    집합 밖의 부모는 무시합니다.
    """
    by_id = {record.id: record for record in records}
    positions: Dict[str, int] = {}
    in_progress = set()

    for start in reversed(records):
        if start.id in positions:
            continue
        # 재귀 없이 깊이 우선 탐색 (긴 이력에서도 스택 한계 없음)
        stack = [(start.id, iter(start.parent_ids))]
        in_progress.add(start.id)
        while stack:
            commit_id, parents = stack[-1]
            advanced = False
            for parent_id in parents:
                if parent_id in by_id and parent_id not in positions and parent_id not in in_progress:
                    in_progress.add(parent_id)
                    stack.append((parent_id, iter(by_id[parent_id].parent_ids)))
                    advanced = True
                    break
            if not advanced:
                stack.pop()
                in_progress.discard(commit_id)
                positions[commit_id] = len(positions)

    return positions


def _without_self_references(record: CommitRecord, references: ReferencedCommits) -> ReferencedCommits:
    git_commits = tuple(
        reference for reference in references.git_commits if not record.id.startswith(reference)
    )
    svn_revisions = tuple(
        revision for revision in references.svn_revisions if revision != record.svn_revision
    )
    return ReferencedCommits(git_commits=git_commits, svn_revisions=svn_revisions)


class CommitGraph:
    """한 번의 실행 동안 읽기 전용으로 유지되는 커밋 집합"""

    def __init__(self, config: LogMiningConfig, index: CommitIndex, order: List[str],
                 revision_map: RevisionMap, resolver: TicketResolver):
        self.config = config
        self.index = index
        self.revision_map = revision_map
        self._order = order
        self._resolver = resolver
        self.logger = logging.getLogger(__name__)

    @classmethod
    def build(cls, raw_commits: Iterable[RawCommit],
              config: Optional[LogMiningConfig] = None) -> 'CommitGraph':
        """원본 커밋으로부터 주석이 달린 그래프 생성

        Args:
            raw_commits: 로그 수집기가 제공한 커밋 (보통 최신순)
            config: 실행 설정 (없으면 기본값)

        Returns:
            CommitGraph: 분류와 티켓 해석이 끝난 그래프

        Raises:
            MalformedTicketPatternError: 티켓 패턴 설정이 잘못된 경우
        """
        logger = logging.getLogger(__name__)
        config = config or get_default_config()

        # 어떤 처리보다 먼저 패턴을 검증
        matcher = TicketMatcher(config)

        records: List[CommitRecord] = []
        seen = set()
        for raw in raw_commits:
            if raw.id.lower() in seen:
                continue
            seen.add(raw.id.lower())
            records.append(CommitRecord.from_raw(raw))

        positions = compute_topological_positions(records)
        records = [record.annotated(topo_position=positions[record.id]) for record in records]

        revision_map = build_revision_map(records)

        records = [
            record.annotated(references=_without_self_references(
                record, extract_references(record.full_message, config.max_svn_range)
            ))
            for record in records
        ]

        index = CommitIndex(records, revision_map.to_commit_map())
        index.link_references()

        classifier = CommitClassifier(index)
        classified = []
        for record in records:
            kind = classifier.classify(record)
            classified.append(record.annotated(kind=kind, is_likely_merge=is_likely_merge(record, kind)))
        for record in classified:
            index.replace(record)

        resolver = TicketResolver(index, matcher)
        resolved = resolver.resolve_all(classified)
        for record in classified:
            index.replace(record.annotated(
                direct_tickets=resolver.direct_tickets(record.id),
                tickets=resolved[record.id],
            ))
        resolver.report_unresolved(config.verbose)

        order = [record.id for record in records]
        logger.info(
            f"커밋 그래프 구성 완료: {len(order)}개 커밋, SVN 리비전 {len(revision_map)}개, "
            f"리비전 충돌 {len(revision_map.collisions)}건"
        )
        return cls(config, index, order, revision_map, resolver)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, commit_id: str) -> bool:
        return self.index.lookup_git_revision(commit_id) is not None

    def __iter__(self):
        return iter(self.records)

    @property
    def records(self) -> List[CommitRecord]:
        """입력 순서의 레코드 목록"""
        return [self.index.get(commit_id) for commit_id in self._order]

    def get(self, commit_id: str) -> Optional[CommitRecord]:
        """전체 또는 유일한 부분 해시로 레코드 조회"""
        return self.index.lookup_git_revision(commit_id)

    def require(self, commit_id: str) -> CommitRecord:
        """레코드 조회 (없으면 UnknownCommitError)"""
        record = self.get(commit_id)
        if record is None:
            reason = "ambiguous" if self.index.is_ambiguous(commit_id) else "not found"
            raise UnknownCommitError(f"Commit `{commit_id}` is not in the commit set ({reason})")
        return record

    def by_svn_revision(self, svn_revision: int) -> Optional[CommitRecord]:
        return self.index.lookup_svn_revision(svn_revision)

    def topological_order(self) -> List[CommitRecord]:
        """부모가 자식보다 앞서는 순서의 레코드 목록"""
        return sorted(self.records, key=lambda record: record.topo_position)

    def reachable_from(self, tip: str, floor: Optional[int] = None) -> List[str]:
        """tip 에서 부모 링크로 도달 가능한 커밋 (tip 포함, 너비 우선 순서)

        Args:
            tip: 시작 커밋 식별자
            floor: SVN 리비전 하한. 하한보다 낮은 리비전의 커밋은 제외되며 그 너머로도 진행하지 않음

        Raises:
            UnknownCommitError: tip 을 찾을 수 없는 경우
        """
        start = self.require(tip)
        if self._below_floor(start, floor):
            return []

        visited = {start.id}
        order: List[str] = []
        queue = deque([start.id])
        while queue:
            commit_id = queue.popleft()
            order.append(commit_id)
            for parent_id in self.index.get(commit_id).parent_ids:
                if parent_id in visited:
                    continue
                visited.add(parent_id)
                parent = self.index.get(parent_id)
                # 집합 밖의 부모(얕은 로그 등)는 건너뜀
                if parent is None or self._below_floor(parent, floor):
                    continue
                queue.append(parent.id)
        return order

    @staticmethod
    def _below_floor(record: CommitRecord, floor: Optional[int]) -> bool:
        if floor is None or record.svn_revision is None:
            return False
        return record.svn_revision < floor

    def forward_references(self, commit_id: str) -> List[str]:
        return self.index.forward_references(commit_id)

    def backward_references(self, commit_id: str) -> List[str]:
        return self.index.backward_references(commit_id)

    def reference_closure(self, commit_id: str) -> List[str]:
        """참조를 전이적으로 따라가 도달하는 커밋 (자기 자신 제외)"""
        return self._resolver.reference_closure(commit_id)

    def tickets_of(self, commit_id: str) -> FrozenSet[TicketId]:
        return self.require(commit_id).tickets

    @property
    def unresolved_references(self) -> List[UnresolvedReference]:
        return self.index.unresolved_references

    @property
    def collisions(self) -> List[RevisionCollision]:
        return self.revision_map.collisions
