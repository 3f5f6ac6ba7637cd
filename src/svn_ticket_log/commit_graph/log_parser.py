"""git log 출력 파서

로그 수집기가 만든 git log 텍스트를 커밋별 RawCommit으로 분리합니다.
기대하는 형식 (``git log --name-only``)::

    CLOG-COMMIT-DELIMITER
    <해시>
    <부모 해시들, 공백 구분>
    <작성자>
    <ISO 8601 작성 시각>
    <메시지 여러 줄>
    CLOG-FILES
    <변경 파일 경로들>
"""

import logging
import re
from datetime import datetime
from typing import Iterator, List, Optional

from svn_ticket_log.constants import LOG_COMMIT_DELIMITER, LOG_FILES_MARKER, SHA1_HASH_ASCII_LENGTH
from svn_ticket_log.exceptions import LogParseError
from .raw_commit import RawCommit

logger = logging.getLogger(__name__)

FULL_HASH_REGEX = re.compile(rf'^[0-9a-fA-F]{{{SHA1_HASH_ASCII_LENGTH}}}$')

# git log 에 전달할 --pretty 형식 문자열
LOG_PRETTY_FORMAT = f"format:{LOG_COMMIT_DELIMITER}%n%H%n%P%n%an%n%aI%n%B%n{LOG_FILES_MARKER}"


def _split_blocks(log_text: str) -> Iterator[List[str]]:
    block: Optional[List[str]] = None
    for line in log_text.splitlines():
        if line == LOG_COMMIT_DELIMITER:
            if block is not None:
                yield block
            block = []
        elif block is not None:
            block.append(line)
    if block is not None:
        yield block


def _parse_timestamp(value: str) -> Optional[datetime]:
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError as e:
        raise LogParseError(f"Invalid commit timestamp: {value!r}") from e


def parse_commit_block(lines: List[str]) -> RawCommit:
    """커밋 블록 하나를 RawCommit으로 변환

    Raises:
        LogParseError: 해시나 헤더 줄이 잘못된 경우
    """
    if len(lines) < 4:
        raise LogParseError(f"Commit entry has too few lines: {lines!r}")

    commit_id = lines[0].strip()
    if not FULL_HASH_REGEX.match(commit_id):
        raise LogParseError(f"SHA-1 hash is invalid: {commit_id!r}")

    parent_ids = tuple(parent.lower() for parent in lines[1].split())
    for parent_id in parent_ids:
        if not FULL_HASH_REGEX.match(parent_id):
            raise LogParseError(f"Parent hash is invalid: {parent_id!r} (commit {commit_id})")

    author = lines[2].strip()
    timestamp = _parse_timestamp(lines[3])

    remainder = lines[4:]
    if LOG_FILES_MARKER in remainder:
        marker_index = len(remainder) - 1 - remainder[::-1].index(LOG_FILES_MARKER)
        message_lines = remainder[:marker_index]
        changed_paths = tuple(path.strip() for path in remainder[marker_index + 1:] if path.strip())
    else:
        message_lines = remainder
        changed_paths = ()

    # %B 끝의 빈 줄 정리
    while message_lines and not message_lines[-1].strip():
        message_lines = message_lines[:-1]
    full_message = '\n'.join(message_lines)
    summary = message_lines[0].strip() if message_lines else ''

    return RawCommit(
        id=commit_id.lower(),
        parent_ids=parent_ids,
        author=author,
        timestamp=timestamp,
        summary=summary,
        full_message=full_message,
        changed_paths=changed_paths,
    )


def parse_log_output(log_text: str) -> List[RawCommit]:
    """git log 출력 전체를 파싱

    Args:
        log_text: LOG_PRETTY_FORMAT 형식의 git log 출력

    Returns:
        로그 순서를 유지한 RawCommit 목록 (중복 해시는 첫 번째만 유지)
    """
    commits: List[RawCommit] = []
    seen = set()
    for block in _split_blocks(log_text):
        raw = parse_commit_block(block)
        if raw.id in seen:
            # --reflog 와 --all 을 함께 쓰면 같은 커밋이 다시 나올 수 있음
            continue
        seen.add(raw.id)
        commits.append(raw)

    logger.debug(f"파싱된 커밋 수: {len(commits)}")
    return commits


def parse_commit_id_list(log_text: str) -> List[str]:
    """``--pretty=format:%H`` 출력에서 커밋 해시 목록 추출"""
    commit_ids: List[str] = []
    for line in log_text.splitlines():
        line = line.strip()
        if not line:
            continue
        if not FULL_HASH_REGEX.match(line):
            raise LogParseError(f"SHA-1 hash is invalid: {line!r}")
        commit_ids.append(line.lower())
    return commit_ids
