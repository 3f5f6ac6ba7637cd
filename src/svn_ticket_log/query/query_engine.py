"""질의 엔진

주석이 달린 커밋 그래프 위에서 list / compare / search 질의를 수행합니다.
git 실행이나 출력은 하지 않고 결과 객체만 만듭니다.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from svn_ticket_log.commit_graph.commit_graph import CommitGraph
from svn_ticket_log.commit_graph.commit_record import CommitRecord
from svn_ticket_log.commit_graph.ticket_id import TicketId
from svn_ticket_log.config.settings import LogMiningConfig
from .results import (
    CompareResult,
    IncludedCommit,
    ListResult,
    RefGroup,
    SearchReport,
    SearchResult,
    TicketGroup,
)


@dataclass(frozen=True)
class RefTip:
    """search 대상 ref (브랜치 또는 태그)와 그 끝 커밋"""
    name: str
    commit_id: str
    is_tag: bool = False


def group_by_ticket(commits: Sequence[IncludedCommit]) -> Tuple[TicketGroup, ...]:
    """티켓별 묶음 (티켓 정렬, 티켓 없는 묶음은 마지막)

    티켓이 여럿인 커밋은 각 묶음에 모두 나타납니다.
    """
    by_ticket: Dict[TicketId, List[IncludedCommit]] = {}
    without_ticket: List[IncludedCommit] = []
    for included in commits:
        tickets = included.commit.sorted_tickets()
        if not tickets:
            without_ticket.append(included)
        for ticket in tickets:
            by_ticket.setdefault(ticket, []).append(included)

    groups = [TicketGroup(ticket, tuple(by_ticket[ticket])) for ticket in sorted(by_ticket)]
    if without_ticket:
        groups.append(TicketGroup(None, tuple(without_ticket)))
    return tuple(groups)


class QueryEngine:
    """list / compare / search 질의 처리"""

    def __init__(self, graph: CommitGraph, config: Optional[LogMiningConfig] = None):
        self.graph = graph
        self.config = config or graph.config
        self.logger = logging.getLogger(__name__)

    def _related_tree(self, commit_id: str, neighbors: Callable[[str], List[str]]) -> IncludedCommit:
        """이웃 관계를 깊이 우선으로 따라간 트리 (한 커밋은 트리에 한 번만)

        참조 사슬이 길어도 재귀 한도에 걸리지 않도록 명시적 스택을 사용합니다.
        """
        root = self.graph.require(commit_id)
        visited = {root.id}
        # 프레임: (레코드, 완성된 하위 노드, 아직 보지 않은 이웃)
        stack: List[Tuple[CommitRecord, List[IncludedCommit], Iterator[str]]] = [
            (root, [], iter(neighbors(root.id)))
        ]
        while True:
            record, children, pending = stack[-1]
            next_id = next((neighbor_id for neighbor_id in pending if neighbor_id not in visited), None)
            if next_id is not None:
                neighbor = self.graph.require(next_id)
                visited.add(neighbor.id)
                stack.append((neighbor, [], iter(neighbors(neighbor.id))))
                continue

            stack.pop()
            node = IncludedCommit(record, tuple(children))
            if not stack:
                return node
            stack[-1][1].append(node)

    def _reference_tree(self, commit_id: str) -> IncludedCommit:
        """커밋과 그 커밋이 (전이적으로) 참조하는 커밋의 트리"""
        return self._related_tree(commit_id, self.graph.forward_references)

    def _back_reference_tree(self, commit_id: str) -> IncludedCommit:
        """커밋과 그 커밋을 (전이적으로) 참조하는 커밋의 트리"""
        return self._related_tree(commit_id, self.graph.backward_references)

    def _is_excluded_merge(self, record: CommitRecord) -> bool:
        return record.is_merge_commit and not self.config.include_merge_commits

    def list_commits(self, commit_ids: Iterable[str]) -> ListResult:
        """주어진 커밋 범위의 커밋과 티켓

        Args:
            commit_ids: 외부에서 revspec 을 해석한 커밋 목록 (로그 순서 유지)

        Raises:
            UnknownCommitError: 커밋 집합에 없는 식별자가 포함된 경우
        """
        included: List[IncludedCommit] = []
        excluded_merges: List[str] = []
        seen = set()

        for commit_id in commit_ids:
            record = self.graph.require(commit_id)
            if record.id in seen:
                continue
            seen.add(record.id)

            if self._is_excluded_merge(record):
                excluded_merges.append(record.id)
                continue
            included.append(self._reference_tree(record.id))

        self.logger.debug(f"list 결과: 커밋 {len(included)}개, 제외된 머지 {len(excluded_merges)}개")
        return ListResult(
            commits=tuple(included),
            groups=group_by_ticket(included),
            excluded_merge_ids=tuple(excluded_merges),
        )

    def _shadowed_duplicates(self, side: Sequence[str], other: Set[str]) -> Tuple[Set[str], Set[str]]:
        """한쪽의 머지/체리픽 커밋이 상대편 커밋을 옮겨 온 경우 양쪽 모두에서 제거할 커밋

        Returns:
            (이쪽에서 제거할 커밋, 상대편에서 제거할 커밋)
        """
        removed_here: Set[str] = set()
        removed_there: Set[str] = set()
        for commit_id in side:
            record = self.graph.require(commit_id)
            if not record.is_likely_merge:
                continue
            shadowed = set(self.graph.reference_closure(commit_id)) & other
            if shadowed:
                removed_here.add(commit_id)
                removed_there |= shadowed
        return removed_here, removed_there

    def compare(self, tip_a: str, tip_b: str,
                name_a: Optional[str] = None, name_b: Optional[str] = None,
                paths: Sequence[str] = ()) -> CompareResult:
        """두 브랜치 끝에서 서로 도달할 수 없는 커밋 비교

        중복 제거는 원래의 양쪽 집합만을 기준으로 계산하므로
        compare(a, b) 는 compare(b, a) 의 양쪽을 바꾼 것과 같습니다.

        Args:
            paths: 지정하면 해당 파일/디렉토리를 변경한 커밋만 비교

        Raises:
            UnknownCommitError: 끝 커밋을 찾을 수 없는 경우
        """
        reachable_a = self.graph.reachable_from(tip_a)
        reachable_b = self.graph.reachable_from(tip_b)
        set_a, set_b = set(reachable_a), set(reachable_b)
        only_a = [commit_id for commit_id in reachable_a if commit_id not in set_b]
        only_b = [commit_id for commit_id in reachable_b if commit_id not in set_a]
        if paths:
            only_a = [commit_id for commit_id in only_a if self._touches(commit_id, paths)]
            only_b = [commit_id for commit_id in only_b if self._touches(commit_id, paths)]

        removed_a: Set[str] = set()
        removed_b: Set[str] = set()
        if not self.config.include_cherry_picks:
            here_a, there_b = self._shadowed_duplicates(only_a, set(only_b))
            here_b, there_a = self._shadowed_duplicates(only_b, set(only_a))
            removed_a = here_a | there_a
            removed_b = here_b | there_b

        kept_a = self._kept(only_a, removed_a)
        kept_b = self._kept(only_b, removed_b)

        tickets_a = self._tickets_of(kept_a)
        tickets_b = self._tickets_of(kept_b)

        self.logger.debug(
            f"compare 결과: a {len(kept_a)}개, b {len(kept_b)}개, "
            f"중복 제거 a {len(removed_a)}개 / b {len(removed_b)}개"
        )
        return CompareResult(
            name_a=name_a or tip_a,
            name_b=name_b or tip_b,
            only_a=tuple(kept_a),
            only_b=tuple(kept_b),
            groups_a=group_by_ticket(kept_a),
            groups_b=group_by_ticket(kept_b),
            tickets_only_a=tuple(sorted(tickets_a - tickets_b)),
            tickets_only_b=tuple(sorted(tickets_b - tickets_a)),
            tickets_both=tuple(sorted(tickets_a & tickets_b)),
            removed_a=tuple(commit_id for commit_id in only_a if commit_id in removed_a),
            removed_b=tuple(commit_id for commit_id in only_b if commit_id in removed_b),
        )

    def _touches(self, commit_id: str, paths: Sequence[str]) -> bool:
        changed = self.graph.require(commit_id).changed_paths
        for path in paths:
            prefix = path.rstrip('/') + '/'
            if any(changed_path == path or changed_path.startswith(prefix) for changed_path in changed):
                return True
        return False

    def _kept(self, commit_ids: Sequence[str], removed: Set[str]) -> List[IncludedCommit]:
        kept = []
        for commit_id in commit_ids:
            if commit_id in removed:
                continue
            if self._is_excluded_merge(self.graph.require(commit_id)):
                continue
            kept.append(self._reference_tree(commit_id))
        return kept

    @staticmethod
    def _tickets_of(commits: Sequence[IncludedCommit]) -> FrozenSet[TicketId]:
        tickets = set()
        for included in commits:
            tickets |= included.commit.tickets
        return frozenset(tickets)

    def search(self, targets: Iterable[Union[TicketId, str]], refs: Iterable[RefTip]) -> SearchReport:
        """대상 티켓을 포함하는 브랜치/태그 검색

        Args:
            targets: 찾을 티켓
            refs: 후보 ref (태그는 include_tags 설정일 때만 검사)

        Returns:
            SearchReport: ref 별 결과, 일치 커밋의 역참조 트리, 같은 커밋 집합의 ref 묶음

        Raises:
            UnknownCommitError: ref 의 끝 커밋을 찾을 수 없는 경우
        """
        target_set = frozenset(
            target if isinstance(target, TicketId) else TicketId(target) for target in targets
        )
        floor = self.config.revision_floor

        results: List[SearchResult] = []
        matching_order: List[str] = []
        for ref in refs:
            if ref.is_tag and not self.config.include_tags:
                continue

            reachable = self.graph.reachable_from(ref.commit_id, floor=floor)
            matched_tickets = set()
            matching_ids = []
            for commit_id in reachable:
                hits = self.graph.require(commit_id).tickets & target_set
                if hits:
                    matched_tickets |= hits
                    matching_ids.append(commit_id)
                    if commit_id not in matching_order:
                        matching_order.append(commit_id)

            results.append(SearchResult(
                ref_name=ref.name,
                matched_tickets=frozenset(matched_tickets),
                total_commits_considered=len(reachable),
                matching_commit_ids=tuple(matching_ids),
                is_tag=ref.is_tag,
            ))

        matching_commits = self._directly_matching_trees(matching_order, target_set)
        report = SearchReport(
            targets=target_set,
            results=tuple(results),
            matching_commits=tuple(matching_commits),
            ref_groups=self._group_refs(results),
        )
        self.logger.info(f"search 완료: {len(results)}개 ref 중 {len(report.matching_refs)}개 일치")
        return report

    def _directly_matching_trees(self, commit_ids: Sequence[str],
                                 targets: FrozenSet[TicketId]) -> List[IncludedCommit]:
        """메시지에 대상 티켓이 직접 나오는 커밋과 그 커밋을 참조하는 커밋의 트리"""
        return [
            self._back_reference_tree(commit_id)
            for commit_id in commit_ids
            if self.graph.require(commit_id).direct_tickets & targets
        ]

    @staticmethod
    def _group_refs(results: Sequence[SearchResult]) -> Tuple[RefGroup, ...]:
        """같은 일치 커밋 집합을 가진 ref 묶음 (ref 가 많은 묶음부터)"""
        grouped: Dict[FrozenSet[str], List[str]] = {}
        commit_order: Dict[FrozenSet[str], Tuple[str, ...]] = {}
        for result in results:
            if not result.matched:
                continue
            key = frozenset(result.matching_commit_ids)
            grouped.setdefault(key, []).append(result.ref_name)
            commit_order.setdefault(key, result.matching_commit_ids)

        ordered = sorted(grouped.items(), key=lambda item: (-len(item[1]), item[1][0]))
        return tuple(RefGroup(commit_order[key], tuple(names)) for key, names in ordered)
