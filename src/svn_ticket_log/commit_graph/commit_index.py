"""커밋 인덱스 모듈

커밋 레코드를 식별자로 찾는 아레나(평면 딕셔너리)와 참조 관계를 관리합니다.
레코드끼리 직접 소유하지 않고 식별자로만 연결하므로 순환 참조가 구조적으로 안전합니다.
"""

import bisect
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from .commit_record import CommitRecord

logger = logging.getLogger(__name__)

_ASCII_HEX_ALPHA_CHARS = set('abcdefABCDEF')


@dataclass(frozen=True)
class UnresolvedReference:
    """커밋 집합에서 찾을 수 없는 참조"""
    commit_id: str
    reference: str
    reference_type: str  # "git" 또는 "svn"
    reason: str = "not found"

    def describe(self) -> str:
        label = "Git revision" if self.reference_type == "git" else "SVN revision"
        return f"{label} `{self.reference}` referenced by commit `{self.commit_id}` could not be resolved ({self.reason})"


def is_likely_a_real_git_revision(potential_git_revision: str) -> bool:
    """우연히 해시처럼 보이는 숫자/반복 문자열이 아닌지 확인"""
    if not potential_git_revision:
        return False
    is_repeated_char = potential_git_revision.strip(potential_git_revision[0]) == ''
    has_hex_alpha = any(ch in _ASCII_HEX_ALPHA_CHARS for ch in potential_git_revision)
    return has_hex_alpha and not is_repeated_char


class CommitIndex:
    """커밋 조회 인덱스

    - 전체/부분 해시 조회 (정렬된 해시 목록 + 이진 탐색)
    - SVN 리비전 조회 (리비전 맵 기반이므로 단사)
    - 순방향/역방향 참조 관계
    """

    def __init__(self, records: Iterable[CommitRecord], svn_revision_map: Optional[Mapping[int, str]] = None):
        self._records: Dict[str, CommitRecord] = {}
        for record in records:
            self._records[record.id.lower()] = record
        self._sorted_ids: List[str] = sorted(self._records)
        self._svn_to_git: Dict[int, str] = {
            revision: commit_id.lower() for revision, commit_id in (svn_revision_map or {}).items()
        }
        self._forward: Dict[str, List[str]] = {}
        self._backward: Dict[str, List[str]] = {}
        self._unresolved: Dict[UnresolvedReference, None] = {}

    def __contains__(self, commit_id: str) -> bool:
        return commit_id.lower() in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, commit_id: str) -> Optional[CommitRecord]:
        return self._records.get(commit_id.lower())

    def replace(self, record: CommitRecord) -> None:
        """같은 식별자의 레코드를 주석이 추가된 레코드로 교체"""
        key = record.id.lower()
        if key not in self._records:
            raise KeyError(record.id)
        self._records[key] = record

    def lookup_git_revision(self, partial_revision: str) -> Optional[CommitRecord]:
        """전체 또는 부분 해시로 커밋 조회 (유일하게 일치할 때만 반환)"""
        return self._records.get(self._resolve_prefix(partial_revision) or '')

    def _resolve_prefix(self, partial_revision: str) -> Optional[str]:
        partial = partial_revision.lower()
        if partial in self._records:
            return partial

        start = bisect.bisect_left(self._sorted_ids, partial)
        matches = []
        for commit_id in self._sorted_ids[start:]:
            if not commit_id.startswith(partial):
                break
            matches.append(commit_id)
            if len(matches) > 1:
                # 여러 개가 일치하면 어느 것이 맞는지 알 수 없음
                return None
        return matches[0] if matches else None

    def is_ambiguous(self, partial_revision: str) -> bool:
        partial = partial_revision.lower()
        start = bisect.bisect_left(self._sorted_ids, partial)
        candidates = self._sorted_ids[start:start + 2]
        return len(candidates) == 2 and all(c.startswith(partial) for c in candidates)

    def lookup_svn_revision(self, svn_revision: int) -> Optional[CommitRecord]:
        commit_id = self._svn_to_git.get(svn_revision)
        return self._records.get(commit_id) if commit_id else None

    def link_references(self) -> None:
        """각 커밋의 참조를 해석하여 순방향/역방향 관계를 구성"""
        self._forward.clear()
        self._backward.clear()

        for key in self._sorted_ids:
            record = self._records[key]
            targets: List[str] = []

            for git_revision in record.references.git_commits:
                referenced = self.lookup_git_revision(git_revision)
                if referenced is None:
                    if is_likely_a_real_git_revision(git_revision):
                        reason = "ambiguous" if self.is_ambiguous(git_revision) else "not found"
                        self._record_unresolved(UnresolvedReference(record.id, git_revision, "git", reason))
                    continue
                if referenced.id != record.id and referenced.id not in targets:
                    targets.append(referenced.id)

            for svn_revision in record.references.svn_revisions:
                referenced = self.lookup_svn_revision(svn_revision)
                if referenced is None:
                    self._record_unresolved(UnresolvedReference(record.id, str(svn_revision), "svn"))
                    continue
                if referenced.id != record.id and referenced.id not in targets:
                    targets.append(referenced.id)

            if targets:
                self._forward[record.id] = targets
                for target in targets:
                    self._backward.setdefault(target, []).append(record.id)

    def _record_unresolved(self, unresolved: UnresolvedReference) -> None:
        # dict 를 순서 있는 집합으로 사용 (중복 제거)
        self._unresolved.setdefault(unresolved, None)

    def forward_references(self, commit_id: str) -> List[str]:
        """해당 커밋이 참조하는 커밋 식별자 목록"""
        record = self.get(commit_id)
        return list(self._forward.get(record.id, [])) if record else []

    def backward_references(self, commit_id: str) -> List[str]:
        """해당 커밋을 참조하는 커밋 식별자 목록"""
        record = self.get(commit_id)
        return list(self._backward.get(record.id, [])) if record else []

    @property
    def unresolved_references(self) -> List[UnresolvedReference]:
        return list(self._unresolved)
