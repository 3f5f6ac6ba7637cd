"""svn-ticket-log 단위 테스트를 위한 pytest 설정"""

import hashlib
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Generator, List, Optional, Sequence

import pytest

from svn_ticket_log.commit_graph.raw_commit import RawCommit
from svn_ticket_log.config.settings import LogMiningConfig

SVN_URL = "https://svn.example.com/repo/trunk"
SVN_UUID = "0a1b2c3d-4e5f-6071-8293-a4b5c6d7e8f9"


def pytest_configure(config):
    """pytest 설정을 구성합니다. 단위/통합 테스트용 마커들을 등록합니다."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def svn_trailer(revision: int, url: str = SVN_URL) -> str:
    return f"git-svn-id: {url}@{revision} {SVN_UUID}"


class CommitFactory:
    """이름으로 커밋을 만들고 이름 -> 40자리 해시를 기억하는 테스트 헬퍼"""

    def __init__(self):
        self.ids: Dict[str, str] = {}
        self._created = 0

    def id(self, name: str) -> str:
        if name not in self.ids:
            self.ids[name] = hashlib.sha1(name.encode('utf-8')).hexdigest()
        return self.ids[name]

    def __call__(self, name: str, message: str, parents: Sequence[str] = (),
                 svn_revision: Optional[int] = None, svn_url: str = SVN_URL,
                 paths: Sequence[str] = ()) -> RawCommit:
        full_message = message
        if svn_revision is not None:
            full_message = f"{message}\n\n{svn_trailer(svn_revision, svn_url)}"
        self._created += 1
        return RawCommit(
            id=self.id(name),
            parent_ids=tuple(self.id(parent) for parent in parents),
            author="tester",
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=self._created),
            summary=full_message.split('\n', 1)[0],
            full_message=full_message,
            changed_paths=tuple(paths),
        )

    def newest_first(self, commits: List[RawCommit]) -> List[RawCommit]:
        """git log 처럼 최신 커밋이 먼저 오도록 정렬"""
        return list(reversed(commits))


@pytest.fixture
def commit_factory() -> CommitFactory:
    """커밋 생성 헬퍼"""
    return CommitFactory()


@pytest.fixture
def default_config() -> LogMiningConfig:
    """기본 설정"""
    return LogMiningConfig()


@pytest.fixture
def verbose_config() -> LogMiningConfig:
    """해석하지 못한 참조를 경고로 표시하는 설정"""
    return LogMiningConfig(verbose=True)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """테스트용 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
