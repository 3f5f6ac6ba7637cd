"""질의 결과 데이터 모델

질의마다 새로 만들어지며 저장되지 않습니다.
각 결과는 JSON 출력을 위한 to_dict 를 제공합니다.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple

from svn_ticket_log.commit_graph.commit_record import CommitRecord
from svn_ticket_log.commit_graph.ticket_id import TicketId


def _ticket_values(tickets) -> List[str]:
    return [ticket.value for ticket in sorted(tickets)]


@dataclass(frozen=True)
class IncludedCommit:
    """결과에 포함된 커밋과 참조 관계 트리

    list/compare 에서는 이 커밋이 참조하는 커밋,
    search 에서는 이 커밋을 참조하는 커밋이 하위 노드가 됩니다.
    참조 사슬이 길 수 있으므로 트리 순회는 모두 명시적 스택을 사용합니다.
    """
    commit: CommitRecord
    # 비교/repr 은 커밋만 사용 (깊은 트리에서 재귀하지 않도록)
    related: Tuple['IncludedCommit', ...] = field(default_factory=tuple, compare=False, repr=False)

    @property
    def id(self) -> str:
        return self.commit.id

    def walk(self) -> Iterator[Tuple[int, Optional['IncludedCommit'], 'IncludedCommit']]:
        """(깊이, 상위 노드, 노드) 를 깊이 우선 전위 순서로 반환 (자신은 깊이 0)"""
        stack: List[Tuple[int, Optional[IncludedCommit], IncludedCommit]] = [(0, None, self)]
        while stack:
            depth, parent, node = stack.pop()
            yield depth, parent, node
            for child in reversed(node.related):
                stack.append((depth + 1, node, child))

    def flatten(self) -> List[CommitRecord]:
        """트리의 모든 커밋 (자신 포함, 깊이 우선)"""
        return [node.commit for _, _, node in self.walk()]

    @staticmethod
    def _commit_dict(commit: CommitRecord) -> Dict[str, Any]:
        return {
            'id': commit.id,
            'summary': commit.summary,
            'kind': commit.kind.value,
            'is_likely_merge': commit.is_likely_merge,
            'svn_revision': commit.svn_revision,
            'tickets': _ticket_values(commit.tickets),
        }

    def to_dict(self) -> Dict[str, Any]:
        """하위 트리는 중첩하지 않고 전위 순서 목록으로 펼침 (depth, parent 로 구조 표현)"""
        data = self._commit_dict(self.commit)
        related = []
        for depth, parent, node in self.walk():
            if parent is None:
                continue
            entry = self._commit_dict(node.commit)
            entry['depth'] = depth
            entry['parent'] = parent.id
            related.append(entry)
        data['related'] = related
        return data


@dataclass(frozen=True)
class TicketGroup:
    """같은 티켓을 가진 커밋 묶음 (ticket 이 None 이면 티켓 없는 커밋)"""
    ticket: Optional[TicketId]
    commits: Tuple[IncludedCommit, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ticket': self.ticket.value if self.ticket else None,
            'commits': [commit.to_dict() for commit in self.commits],
        }


@dataclass(frozen=True)
class ListResult:
    """list 질의 결과"""
    commits: Tuple[IncludedCommit, ...]
    groups: Tuple[TicketGroup, ...]
    excluded_merge_ids: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def tickets(self) -> List[TicketId]:
        return [group.ticket for group in self.groups if group.ticket is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'commits': [commit.to_dict() for commit in self.commits],
            'groups': [group.to_dict() for group in self.groups],
            'tickets': [ticket.value for ticket in self.tickets],
            'excluded_merge_ids': list(self.excluded_merge_ids),
        }


@dataclass(frozen=True)
class CompareResult:
    """compare 질의 결과

    a/b 한쪽에서만 도달 가능한 커밋과 티켓을 담습니다.
    removed_* 는 상대편에 같은 변경이 있어 제외된 중복 커밋입니다.
    """
    name_a: str
    name_b: str
    only_a: Tuple[IncludedCommit, ...]
    only_b: Tuple[IncludedCommit, ...]
    groups_a: Tuple[TicketGroup, ...]
    groups_b: Tuple[TicketGroup, ...]
    tickets_only_a: Tuple[TicketId, ...]
    tickets_only_b: Tuple[TicketId, ...]
    tickets_both: Tuple[TicketId, ...]
    removed_a: Tuple[str, ...] = field(default_factory=tuple)
    removed_b: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def commit_ids_a(self) -> FrozenSet[str]:
        return frozenset(commit.id for commit in self.only_a)

    @property
    def commit_ids_b(self) -> FrozenSet[str]:
        return frozenset(commit.id for commit in self.only_b)

    def swapped(self) -> 'CompareResult':
        """양쪽을 바꾼 결과 (compare(b, a) 와 같은 구조)"""
        return replace(
            self,
            name_a=self.name_b, name_b=self.name_a,
            only_a=self.only_b, only_b=self.only_a,
            groups_a=self.groups_b, groups_b=self.groups_a,
            tickets_only_a=self.tickets_only_b, tickets_only_b=self.tickets_only_a,
            removed_a=self.removed_b, removed_b=self.removed_a,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name_a': self.name_a,
            'name_b': self.name_b,
            'only_a': [commit.to_dict() for commit in self.only_a],
            'only_b': [commit.to_dict() for commit in self.only_b],
            'tickets_only_a': [ticket.value for ticket in self.tickets_only_a],
            'tickets_only_b': [ticket.value for ticket in self.tickets_only_b],
            'tickets_both': [ticket.value for ticket in self.tickets_both],
            'removed_a': list(self.removed_a),
            'removed_b': list(self.removed_b),
        }


@dataclass(frozen=True)
class SearchResult:
    """ref 하나에 대한 search 결과"""
    ref_name: str
    matched_tickets: FrozenSet[TicketId]
    total_commits_considered: int
    matching_commit_ids: Tuple[str, ...] = field(default_factory=tuple)
    is_tag: bool = False

    @property
    def matched(self) -> bool:
        return bool(self.matched_tickets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ref_name': self.ref_name,
            'is_tag': self.is_tag,
            'matched_tickets': _ticket_values(self.matched_tickets),
            'total_commits_considered': self.total_commits_considered,
            'matching_commit_ids': list(self.matching_commit_ids),
        }


@dataclass(frozen=True)
class RefGroup:
    """같은 일치 커밋 집합을 가진 ref 묶음"""
    commit_ids: Tuple[str, ...]
    ref_names: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {'commit_ids': list(self.commit_ids), 'ref_names': list(self.ref_names)}


@dataclass(frozen=True)
class SearchReport:
    """search 질의 전체 결과"""
    targets: FrozenSet[TicketId]
    results: Tuple[SearchResult, ...]
    matching_commits: Tuple[IncludedCommit, ...] = field(default_factory=tuple)
    ref_groups: Tuple[RefGroup, ...] = field(default_factory=tuple)

    @property
    def matching_refs(self) -> List[str]:
        return [result.ref_name for result in self.results if result.matched]

    @property
    def found_tickets(self) -> FrozenSet[TicketId]:
        found = set()
        for result in self.results:
            found |= result.matched_tickets
        return frozenset(found)

    @property
    def missing_tickets(self) -> FrozenSet[TicketId]:
        return frozenset(self.targets - self.found_tickets)

    def result_for(self, ref_name: str) -> Optional[SearchResult]:
        for result in self.results:
            if result.ref_name == ref_name:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'targets': _ticket_values(self.targets),
            'matching_refs': self.matching_refs,
            'missing_tickets': _ticket_values(self.missing_tickets),
            'results': [result.to_dict() for result in self.results],
            'matching_commits': [commit.to_dict() for commit in self.matching_commits],
            'ref_groups': [group.to_dict() for group in self.ref_groups],
        }
