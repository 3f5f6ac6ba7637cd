"""로그 수집 패키지

git 저장소에서 커밋 로그와 ref 목록을 읽고 원격 브랜치 우선 해석을 제공합니다.
"""

from .git_log_reader import GitLogReader
from .upstreaming import (
    RemoteBranchDatabase,
    build_remote_branch_database,
    upstream_ref_if_possible,
    upstream_revspec,
)

__all__ = [
    'GitLogReader',
    'RemoteBranchDatabase',
    'build_remote_branch_database',
    'upstream_ref_if_possible',
    'upstream_revspec',
]
