"""git 로그 수집기

저장소에서 커밋 로그, revspec 범위, ref 목록을 읽어
커밋 그래프와 질의 엔진이 사용할 수 있는 형태로 전달합니다.
"""

import logging
import shlex
from typing import List, Optional, Sequence

from svn_ticket_log.commit_graph.log_parser import LOG_PRETTY_FORMAT, parse_commit_id_list, parse_log_output
from svn_ticket_log.commit_graph.raw_commit import RawCommit
from svn_ticket_log.config.settings import LogMiningConfig, get_default_config
from svn_ticket_log.query.query_engine import RefTip
from svn_ticket_log.tools.git_command_tool import GitCommandTool
from .upstreaming import RemoteBranchDatabase, build_remote_branch_database, upstream_revspec

REF_FORMAT = "%(objectname)%09%(*objectname)%09%(refname)"
HEADS_PREFIX = "refs/heads/"
REMOTES_PREFIX = "refs/remotes/"
TAGS_PREFIX = "refs/tags/"


class GitLogReader:
    """git 저장소 로그 수집기"""

    def __init__(self, repo_path: str, config: Optional[LogMiningConfig] = None,
                 git_tool: Optional[GitCommandTool] = None):
        self.repo_path = repo_path
        self.config = config or get_default_config()
        self.git_tool = git_tool or GitCommandTool(repo_path)
        self.logger = logging.getLogger(__name__)
        self._remote_branches: Optional[RemoteBranchDatabase] = None

    def read_all_commits(self, include_reflog: bool = True) -> List[RawCommit]:
        """저장소의 전체 커밋 (참조 해석을 위해 reflog 에만 남은 커밋도 포함)

        Raises:
            GitCommandError: git 실행 실패
            LogParseError: 로그 형식이 예상과 다른 경우
        """
        args = ["log", "--all", "--full-history", "--name-only", f"--pretty={LOG_PRETTY_FORMAT}"]
        if include_reflog:
            args.insert(2, "--reflog")

        self.logger.info(f"커밋 로그 수집 시작: {self.repo_path}")
        output = self.git_tool.run(*args)
        commits = parse_log_output(output)
        self.logger.info(f"커밋 로그 수집 완료: {len(commits)}개 커밋")
        return commits

    @property
    def remote_branches(self) -> RemoteBranchDatabase:
        if self._remote_branches is None:
            remotes = self.git_tool.run("remote").splitlines()
            branch_lines = self.git_tool.run("branch", "--list", "--remotes").splitlines()
            self._remote_branches = build_remote_branch_database(remotes, branch_lines)
            self.logger.debug(f"원격 브랜치 목록: {sum(len(b) for b in self._remote_branches.values())}개")
        return self._remote_branches

    def resolve_revspec(self, revspec: str) -> str:
        """설정에 따라 revspec 의 ref 를 원격 브랜치로 바꿈"""
        if not self.config.prefer_upstream:
            return revspec
        resolved = upstream_revspec(self.remote_branches, revspec)
        if resolved != revspec:
            self.logger.info(f"원격 브랜치 기준으로 revspec 변경: {revspec} -> {resolved}")
        return resolved

    def commit_ids(self, revspec: str, paths: Sequence[str] = ()) -> List[str]:
        """revspec 범위의 커밋 해시 (git log 순서)

        Args:
            revspec: 예: ``release/1.0..main``, ``main ^dev``
            paths: 지정하면 해당 경로를 변경한 커밋만
        """
        args = ["log", "--pretty=format:%H", *shlex.split(self.resolve_revspec(revspec))]
        if paths:
            args.append("--")
            args.extend(paths)
        return parse_commit_id_list(self.git_tool.run(*args))

    def resolve_ref(self, ref: str) -> str:
        """ref 를 커밋 해시로 해석"""
        resolved = self.resolve_revspec(ref)
        output = self.git_tool.run("rev-parse", "--verify", "--quiet", f"{resolved}^{{commit}}")
        return output.strip().lower()

    def list_refs(self, include_tags: Optional[bool] = None) -> List[RefTip]:
        """search 대상 브랜치(와 태그) 목록

        prefer_upstream 설정이면 원격 브랜치가 있는 로컬 브랜치는 원격 브랜치로 대체합니다.
        """
        if include_tags is None:
            include_tags = self.config.include_tags

        patterns = ["refs/heads", "refs/remotes"]
        if include_tags:
            patterns.append("refs/tags")
        output = self.git_tool.run("for-each-ref", f"--format={REF_FORMAT}", *patterns)

        refs: List[RefTip] = []
        for line in output.splitlines():
            fields = line.split('\t')
            if len(fields) != 3:
                continue
            object_id, peeled_id, refname = fields
            # 주석 태그는 태그 객체가 아니라 가리키는 커밋을 사용
            commit_id = (peeled_id or object_id).lower()

            if refname.startswith(HEADS_PREFIX):
                name = refname[len(HEADS_PREFIX):]
                if self.config.prefer_upstream and self._has_upstream(name):
                    continue
                refs.append(RefTip(name, commit_id))
            elif refname.startswith(REMOTES_PREFIX):
                name = refname[len(REMOTES_PREFIX):]
                if name.endswith('/HEAD'):
                    continue
                refs.append(RefTip(name, commit_id))
            elif refname.startswith(TAGS_PREFIX):
                refs.append(RefTip(refname[len(TAGS_PREFIX):], commit_id, is_tag=True))

        self.logger.debug(f"ref 목록: {len(refs)}개")
        return refs

    def _has_upstream(self, branch: str) -> bool:
        return any(branch in branches for branches in self.remote_branches.values())
