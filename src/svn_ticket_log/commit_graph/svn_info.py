"""SVN 메타데이터 추출 모듈

git-svn이 커밋 메시지 끝에 추가한 트레일러에서 SVN URL과 리비전을 추출합니다.
트레일러 형식: ``git-svn-id: <URL>@<REVISION> <UUID>``
"""

import re
from dataclasses import dataclass
from typing import Optional

from svn_ticket_log.constants import GIT_SVN_ID_STR

# 전체 구조가 일치하는 줄만 트레일러로 인정 (줄 앞 공백 불허, 뒤 공백 허용)
SVN_TRAILER_REGEX = re.compile(
    rf'^{GIT_SVN_ID_STR}:[ \t]+(?P<url>\S+)@(?P<revision>\d+)[ \t]+'
    r'(?P<uuid>[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})\s*$'
)


@dataclass(frozen=True)
class SvnInfo:
    """SVN 원본 커밋 정보"""
    url: str
    revision: int
    uuid: Optional[str] = None

    def to_dict(self):
        """JSON 직렬화를 위한 딕셔너리 변환"""
        return {'url': self.url, 'revision': self.revision, 'uuid': self.uuid}


def is_svn_trailer_line(line: str) -> bool:
    """해당 줄이 git-svn 트레일러 구조와 일치하는지 확인"""
    return SVN_TRAILER_REGEX.match(line) is not None


def extract_svn_info(message: str) -> Optional[SvnInfo]:
    """커밋 메시지에서 SVN 트레일러 추출

    본문에 다른 커밋의 트레일러가 인용된 경우를 대비하여
    구조가 완전히 일치하는 마지막 줄만 사용합니다.

    Args:
        message: 전체 커밋 메시지

    Returns:
        SvnInfo 또는 트레일러가 없으면 None
    """
    for line in reversed(message.splitlines()):
        match = SVN_TRAILER_REGEX.match(line)
        if match:
            return SvnInfo(
                url=match.group('url'),
                revision=int(match.group('revision')),
                uuid=match.group('uuid').lower(),
            )
    return None
