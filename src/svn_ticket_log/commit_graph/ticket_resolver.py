"""티켓 참조 해석기 모듈

커밋 메시지에서 티켓을 추출하고, 다른 커밋을 참조하는 커밋에는
참조된 커밋의 티켓을 전이적으로 합칩니다.

1단계에서 모든 커밋의 직접 티켓을 구한 뒤 2단계에서 참조를 따라가므로
해석 순서와 무관하게 같은 결과가 나오며, 방문 집합으로 순환 참조에서도 종료합니다.
"""

import logging
from typing import Dict, FrozenSet, Iterable, List

from .commit_index import CommitIndex
from .commit_kind import CommitKind
from .commit_record import CommitRecord
from .references import (
    REVERT_SUMMARY_REGEX,
    REVERT_TRAILER_REGEX,
    SVN_REVERT_REGEX,
    content_lines,
)
from .ticket_id import TicketId
from .ticket_pattern import TicketMatcher


class TicketResolver:
    """티켓 추출 및 전이적 해석"""

    def __init__(self, index: CommitIndex, matcher: TicketMatcher):
        self.index = index
        self.matcher = matcher
        self.logger = logging.getLogger(__name__)
        self._direct: Dict[str, FrozenSet[TicketId]] = {}

    def extract_direct_tickets(self, record: CommitRecord) -> FrozenSet[TicketId]:
        """커밋 자체의 요약과 본문에 나타난 티켓

        리버트는 되돌린 커밋의 요약을 인용하므로 인용된 요약과 트레일러는 제외합니다.
        ``Revert r123`` 문구는 그 부분만 지우고 같은 줄의 나머지는 유지합니다.
        """
        lines = content_lines(record.full_message)
        summary = record.summary
        body_lines = lines[1:]

        if record.kind == CommitKind.REVERT:
            if REVERT_SUMMARY_REGEX.match(summary):
                summary = ''
            summary = SVN_REVERT_REGEX.sub('', summary, count=1)
            body_lines = [
                SVN_REVERT_REGEX.sub('', line, count=1)
                for line in body_lines
                if not REVERT_TRAILER_REGEX.match(line)
            ]

        return frozenset(self.matcher.extract(summary, body_lines))

    def resolve_all(self, records: Iterable[CommitRecord]) -> Dict[str, FrozenSet[TicketId]]:
        """모든 커밋의 최종 티켓 집합 계산

        Returns:
            커밋 식별자 -> 티켓 집합
        """
        records = list(records)

        # 1단계: 직접 티켓 (참조 대상이 되기 전에 모두 확정)
        self._direct = {record.id: self.extract_direct_tickets(record) for record in records}

        # 2단계: 확정된 직접 티켓만 읽으며 참조를 따라감
        resolved: Dict[str, FrozenSet[TicketId]] = {}
        for record in records:
            resolved[record.id] = self._collect_tickets(record)

        inherited = sum(1 for record in records if resolved[record.id] != self._direct[record.id])
        self.logger.debug(f"티켓 해석 완료: {len(records)}개 커밋, 참조로 티켓을 물려받은 커밋 {inherited}개")
        return resolved

    def direct_tickets(self, commit_id: str) -> FrozenSet[TicketId]:
        return self._direct.get(commit_id, frozenset())

    def _collect_tickets(self, root: CommitRecord) -> FrozenSet[TicketId]:
        tickets = set(self._direct.get(root.id, frozenset()))
        if root.kind == CommitKind.REVERT:
            # 리버트는 되돌린 커밋의 티켓을 물려받지 않음
            return frozenset(tickets)

        for commit_id in self.reference_closure(root.id):
            tickets |= self._direct.get(commit_id, frozenset())
        return frozenset(tickets)

    def reference_closure(self, commit_id: str) -> List[str]:
        """참조를 전이적으로 따라가 도달하는 커밋 목록 (자기 자신 제외, 방문 순서)

        리버트 커밋은 도달은 하되 그 너머로 더 따라가지 않습니다.
        """
        root = self.index.get(commit_id)
        if root is None:
            return []

        visited = {root.id}
        order: List[str] = []
        stack = list(reversed(self.index.forward_references(root.id)))
        while stack:
            current_id = stack.pop()
            if current_id in visited:
                continue
            visited.add(current_id)
            order.append(current_id)

            current = self.index.get(current_id)
            if current is None or current.kind == CommitKind.REVERT:
                continue
            for target in reversed(self.index.forward_references(current_id)):
                if target not in visited:
                    stack.append(target)
        return order

    def report_unresolved(self, verbose: bool) -> None:
        """해석하지 못한 참조를 한 번씩 보고 (verbose 모드에서만 경고로 노출)"""
        unresolved = self.index.unresolved_references
        if not unresolved:
            return

        log = self.logger.warning if verbose else self.logger.debug
        reported = set()
        for item in unresolved:
            message = item.describe()
            if message in reported:
                continue
            reported.add(message)
            log(message)
        log(f"해석하지 못한 참조: {len(reported)}개")
