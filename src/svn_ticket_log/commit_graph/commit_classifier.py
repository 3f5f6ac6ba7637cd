"""커밋 분류기 모듈

우선순위가 정해진 규칙 목록으로 커밋 종류를 결정합니다.
각 규칙은 (레코드, 조회 객체)를 받아 종류 또는 None(해당 없음)을 반환하는 순수 함수입니다.
"""

import logging
from typing import Callable, Optional, Protocol, Sequence

from svn_ticket_log.constants import SHA1_HASH_ASCII_LENGTH
from .commit_index import is_likely_a_real_git_revision
from .commit_kind import CommitKind
from .commit_record import CommitRecord
from .references import (
    find_cherry_pick_source,
    find_revert_target,
    find_svn_revert_target,
    mentions_merging,
    mentions_merging_or_picking,
)


class CommitLookup(Protocol):
    """분류 규칙이 이웃 커밋을 찾을 때 사용하는 조회 인터페이스"""

    def lookup_git_revision(self, partial_revision: str) -> Optional[CommitRecord]: ...

    def lookup_svn_revision(self, svn_revision: int) -> Optional[CommitRecord]: ...


ClassificationRule = Callable[[CommitRecord, CommitLookup], Optional[CommitKind]]


def has_concrete_reference(record: CommitRecord, lookup: CommitLookup) -> bool:
    """실제 커밋을 가리킬 만한 참조가 있는지 확인

    SVN 리비전은 ``r123`` 같은 명시적 표기에서만 추출되므로 그대로 인정합니다.
    Git 해시는 그래프에서 찾을 수 있거나 해시처럼 보이는 경우만 인정하여
    날짜나 큰 번호 같은 숫자만으로 된 토큰을 제외합니다.
    """
    references = record.references
    if references.svn_revisions:
        return True
    for git_revision in references.git_commits:
        referenced = lookup.lookup_git_revision(git_revision)
        if referenced is not None and referenced.id != record.id:
            return True
        if referenced is None and is_likely_a_real_git_revision(git_revision):
            return True
    return False


def merge_rule(record: CommitRecord, lookup: CommitLookup) -> Optional[CommitKind]:
    """머지: 부모가 여럿이고, 머지를 언급하며, 다른 커밋을 참조

    부모 수만으로는 부족하며 "merge"라는 단어만 있는 메시지도 제외합니다.
    """
    if not record.is_merge_commit:
        return None
    if not mentions_merging(record.full_message):
        return None
    if not has_concrete_reference(record, lookup):
        return None
    return CommitKind.MERGE


def revert_rule(record: CommitRecord, lookup: CommitLookup) -> Optional[CommitKind]:
    """리버트: 특정 이전 커밋을 되돌렸다는 구조적 문구

    체리픽보다 먼저 검사하여 리버트가 체리픽으로 오분류되지 않게 합니다.
    """
    target = find_revert_target(record.full_message)
    if target and not record.id.startswith(target.lower()):
        return CommitKind.REVERT

    svn_target = find_svn_revert_target(record.full_message)
    if svn_target is not None and svn_target != record.svn_revision:
        return CommitKind.REVERT
    return None


def cherry_pick_rule(record: CommitRecord, lookup: CommitLookup) -> Optional[CommitKind]:
    """체리픽: ``(cherry picked from commit X)`` 트레일러의 원본이 같은 그래프에 존재"""
    source = find_cherry_pick_source(record.full_message)
    if not source:
        return None
    source_commit = lookup.lookup_git_revision(source)
    if source_commit is None or source_commit.id == record.id:
        return None
    return CommitKind.CHERRY_PICK


DEFAULT_RULES: Sequence[ClassificationRule] = (merge_rule, revert_rule, cherry_pick_rule)


def classify(record: CommitRecord, lookup: CommitLookup,
             rules: Sequence[ClassificationRule] = DEFAULT_RULES) -> CommitKind:
    """첫 번째로 일치하는 규칙의 종류, 없으면 PLAIN"""
    for rule in rules:
        kind = rule(record, lookup)
        if kind is not None:
            return kind
    return CommitKind.PLAIN


def is_likely_merge(record: CommitRecord, kind: CommitKind) -> bool:
    """다른 커밋의 내용을 옮겨 온 커밋일 가능성 (체리픽, SVN 머지 등)

    완벽하지 않은 휴리스틱입니다. 조건 중 하나라도 만족하면 참:
    - 부모가 여럿인 머지 커밋
    - 머지/체리픽을 언급하면서 다른 커밋을 하나 이상 참조
    - 전체 길이 해시 하나만 참조 (체리픽 메시지의 특징)
    - SVN 리비전을 여러 개 참조
    리버트는 내용을 옮긴 것이 아니므로 제외합니다.
    """
    if kind == CommitKind.REVERT:
        return False
    if kind in (CommitKind.MERGE, CommitKind.CHERRY_PICK):
        return True

    references = record.references
    if record.is_merge_commit:
        return True
    if mentions_merging_or_picking(record.full_message) and not references.is_empty():
        return True
    if len(references.git_commits) == 1 and len(references.git_commits[0]) == SHA1_HASH_ASCII_LENGTH:
        return True
    return len(references.svn_revisions) > 1


class CommitClassifier:
    """규칙 목록을 보관하고 커밋을 분류하는 클래스"""

    def __init__(self, lookup: CommitLookup, rules: Sequence[ClassificationRule] = DEFAULT_RULES):
        self.lookup = lookup
        self.rules = tuple(rules)
        self.logger = logging.getLogger(__name__)

    def classify(self, record: CommitRecord) -> CommitKind:
        kind = classify(record, self.lookup, self.rules)
        if kind != CommitKind.PLAIN:
            self.logger.debug(f"커밋 분류: {record.short_id()} -> {kind.value}")
        return kind
