"""원격 추적 브랜치 우선 ref 해석

로컬 브랜치가 오래되었을 수 있으므로 같은 이름의 원격 브랜치가 있으면
``<remote>/<branch>`` 로 바꿉니다.
"""

import re
from typing import Dict, Iterable, Set

RemoteBranchDatabase = Dict[str, Set[str]]

# revspec 에서 ref 가 아닌 부분 (공백, .., ..., @{...}, ^, ^!, ^@, ^-N, ~, ?, [)
REVSPEC_REF_SPLITTING_REGEX = re.compile(r'\s+|\.{2,3}|@\{.*\}|\^(?:-\d+|[!@])?|[~?\[]')
HEAD_MARKER_ARROW = "HEAD -> "


def upstream_ref_if_possible(remote_branch_database: RemoteBranchDatabase, reference: str) -> str:
    for remote in sorted(remote_branch_database):
        if reference in remote_branch_database[remote]:
            return f"{remote}/{reference}"
    return reference


def upstream_revspec(remote_branch_database: RemoteBranchDatabase, revspec: str) -> str:
    """revspec 안의 각 ref 를 가능하면 원격 브랜치로 바꿈

    예: ``main..feature`` -> ``origin/main..origin/feature``
    """
    parts = []
    last_index = 0
    for match in REVSPEC_REF_SPLITTING_REGEX.finditer(revspec):
        reference = revspec[last_index:match.start()]
        if reference:
            parts.append(upstream_ref_if_possible(remote_branch_database, reference))
        parts.append(match.group(0))
        last_index = match.end()

    reference = revspec[last_index:]
    if reference:
        parts.append(upstream_ref_if_possible(remote_branch_database, reference))
    return ''.join(parts)


def build_remote_branch_database(remotes: Iterable[str],
                                 remote_branch_lines: Iterable[str]) -> RemoteBranchDatabase:
    """``git remote`` 와 ``git branch --list --remotes`` 출력으로 원격 브랜치 목록 구성"""
    # "origin" 과 "origin-mirror" 처럼 접두어가 겹치면 긴 이름을 먼저 검사
    remote_names = sorted({remote.strip() for remote in remotes if remote.strip()}, key=len, reverse=True)

    database: RemoteBranchDatabase = {}
    for line in remote_branch_lines:
        line = line.strip()
        if not line or HEAD_MARKER_ARROW in line:
            continue
        for remote in remote_names:
            if line.startswith(remote + '/'):
                database.setdefault(remote, set()).add(line[len(remote) + 1:])
                break
    return database
