"""커밋 참조 추출 모듈

커밋 메시지에서 다른 커밋을 가리키는 참조(Git 해시, SVN 리비전)와
리버트/체리픽 트레일러를 찾습니다. 메시지 패턴은 모두 이 모듈에 모아 두어
그래프 탐색이나 리비전 맵 코드와 분리합니다.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .svn_info import is_svn_trailer_line

logger = logging.getLogger(__name__)

# 7자 이상의 해시만 인정 (짧은 숫자 오인 방지)
GIT_COMMIT_REFERENCE_REGEX = re.compile(r'\b([0-9a-f]{7,40})\b', re.IGNORECASE)
# "r123", "rev 12", "revisions 10-12, 15", "commit 88" 형태를 묶음으로 찾음
SVN_COMMIT_REFERENCE_REGEX = re.compile(
    r'\b(?:(?:commit|revision|rev)(?:s|\(s\))? |r)(\d+(?:-\d+)?(?:, ?\d+(?:-\d+)?)*)\b',
    re.IGNORECASE,
)
MERGE_MENTION_REGEX = re.compile(r'\bmerg(?:e|ed|es|ing)\b', re.IGNORECASE)
MERGE_OR_PICK_MENTION_REGEX = re.compile(r'(merg(?:e|ing)|cherry.?pick)', re.IGNORECASE)

# git revert / git cherry-pick -x 가 추가하는 트레일러
REVERT_TRAILER_REGEX = re.compile(r'^This reverts commit ([0-9A-Za-z]+)\b', re.MULTILINE)
SVN_REVERT_REGEX = re.compile(
    r'^Revert(?:ed|ing|s)?:?\s+(?:r|rev\.?\s*|revision\s+)(\d+)\b',
    re.IGNORECASE | re.MULTILINE,
)
CHERRY_PICK_TRAILER_REGEX = re.compile(r'\(cherry picked from commit ([0-9A-Za-z]+)\)')
# git revert 의 기본 요약: Revert "<원래 요약>"
REVERT_SUMMARY_REGEX = re.compile(r'^Revert\s+"(?:.*)"\s*$')


@dataclass(frozen=True)
class ReferencedCommits:
    """메시지에서 찾은 다른 커밋 참조 (등장 순서, 중복 제거)"""
    git_commits: Tuple[str, ...] = field(default_factory=tuple)
    svn_revisions: Tuple[int, ...] = field(default_factory=tuple)

    def is_empty(self) -> bool:
        return not self.git_commits and not self.svn_revisions

    def to_dict(self):
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {'git_commits': list(self.git_commits), 'svn_revisions': list(self.svn_revisions)}


def _expand_svn_selection(selection: str, max_svn_range: int) -> List[int]:
    """"16734-16735" 같은 연속 구간을 리비전 목록으로 펼침"""
    selection = selection.strip()
    if '-' not in selection:
        return [int(selection)]

    start_str, end_str = selection.split('-', 1)
    start, end = sorted((int(start_str), int(end_str)))
    if end - start + 1 > max_svn_range:
        logger.debug(f"너무 넓은 SVN 리비전 범위 무시: {selection}")
        return []
    return list(range(start, end + 1))


def find_revert_target(message: str) -> Optional[str]:
    """``This reverts commit X`` 트레일러의 대상 커밋"""
    matches = REVERT_TRAILER_REGEX.findall(message)
    return matches[-1] if matches else None


def find_svn_revert_target(message: str) -> Optional[int]:
    """``Revert r123`` 형태로 되돌린 SVN 리비전"""
    match = SVN_REVERT_REGEX.search(message)
    return int(match.group(1)) if match else None


def find_cherry_pick_source(message: str) -> Optional[str]:
    """``(cherry picked from commit X)`` 트레일러의 원본 커밋"""
    matches = CHERRY_PICK_TRAILER_REGEX.findall(message)
    return matches[-1] if matches else None


def mentions_merging(message: str) -> bool:
    return MERGE_MENTION_REGEX.search(message) is not None


def mentions_merging_or_picking(message: str) -> bool:
    return MERGE_OR_PICK_MENTION_REGEX.search(message) is not None


def content_lines(message: str) -> List[str]:
    """git-svn 트레일러를 제외한 메시지 줄

    트레일러의 UUID가 Git 해시로 오인되지 않도록 제외합니다.
    """
    return [line for line in message.splitlines() if not is_svn_trailer_line(line)]


def extract_references(message: str, max_svn_range: int = 20) -> ReferencedCommits:
    """커밋 메시지에서 다른 커밋 참조 추출

    Args:
        message: 전체 커밋 메시지
        max_svn_range: 펼칠 수 있는 SVN 리비전 구간의 최대 폭

    Returns:
        ReferencedCommits: Git 해시와 SVN 리비전 참조
    """
    git_commits: List[str] = []
    svn_revisions: List[int] = []

    for line in content_lines(message):
        for match in GIT_COMMIT_REFERENCE_REGEX.finditer(line):
            reference = match.group(1).lower()
            if reference not in git_commits:
                git_commits.append(reference)

        for match in SVN_COMMIT_REFERENCE_REGEX.finditer(line):
            # 묶음 예: "16732, 16734-16735, 16768"
            for selection in match.group(1).split(','):
                for revision in _expand_svn_selection(selection, max_svn_range):
                    if revision not in svn_revisions:
                        svn_revisions.append(revision)

    # 트레일러의 대상은 해시 형태가 아니어도 항상 참조로 취급
    for structural in (find_revert_target(message), find_cherry_pick_source(message)):
        if structural and structural.lower() not in git_commits:
            git_commits.append(structural.lower())

    return ReferencedCommits(git_commits=tuple(git_commits), svn_revisions=tuple(svn_revisions))
