from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class RevisionMapEntry:
    """SVN 리비전 하나와 그에 대응하는 Git 커밋"""
    svn_revision: int
    commit_id: str
    svn_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'svn_revision': self.svn_revision,
            'commit_id': self.commit_id,
            'svn_url': self.svn_url,
        }


@dataclass(frozen=True)
class RevisionCollision:
    """두 커밋이 같은 SVN 리비전을 주장하는 경우의 기록"""
    svn_revision: int
    kept_commit_id: str
    dropped_commit_id: str

    def describe(self) -> str:
        return (
            f"SVN revision r{self.svn_revision} is claimed by commits "
            f"`{self.kept_commit_id}` and `{self.dropped_commit_id}`; keeping `{self.kept_commit_id}`"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'svn_revision': self.svn_revision,
            'kept_commit_id': self.kept_commit_id,
            'dropped_commit_id': self.dropped_commit_id,
        }
