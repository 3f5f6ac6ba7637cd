"""리비전 맵 출력 모듈

Markdown 표/목록 형식과 git-svn 호환 바이너리 파일을 씁니다.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

from svn_ticket_log.config.settings import LogMiningConfig
from .revision_map import RevisionMap

logger = logging.getLogger(__name__)

URL_TABLE_SUFFIX = ".urls"


def _escape_cell(text: str) -> str:
    return text.replace('|', '\\|').strip()


def _commit_cell(commit_id: str, hash_length: int, git_url_base: Optional[str]) -> str:
    short = f"`{commit_id[:hash_length]}`"
    if git_url_base:
        return f"[{short}]({git_url_base.rstrip('/')}/{commit_id})"
    return short


def render_markdown_table(revision_map: RevisionMap,
                          config: LogMiningConfig,
                          summaries: Optional[Mapping[str, str]] = None) -> str:
    """리비전 맵을 Markdown 표로 변환

    Args:
        revision_map: 리비전 맵
        config: 정렬 방향, 요약 열 포함 여부, 해시 길이, 커밋 링크 주소
        summaries: 커밋 식별자 -> 요약 (요약 열에 사용)

    Returns:
        ``| Revision | Commit | Summary |`` 형태의 표
    """
    summaries = summaries or {}
    with_summary = config.markdown_summary

    if with_summary:
        lines = ["| Revision | Commit | Summary |", "|---:|---|---|"]
    else:
        lines = ["| Revision | Commit |", "|---:|---|"]

    for entry in revision_map.entries(descending=config.markdown_descending):
        commit_cell = _commit_cell(entry.commit_id, config.hash_length, config.git_url_base)
        if with_summary:
            summary = _escape_cell(summaries.get(entry.commit_id, ""))
            lines.append(f"| r{entry.svn_revision} | {commit_cell} | {summary} |")
        else:
            lines.append(f"| r{entry.svn_revision} | {commit_cell} |")

    return '\n'.join(lines) + '\n'


def render_markdown_list(revision_map: RevisionMap, hash_length: int = 10,
                         descending: bool = False) -> str:
    """git-svn 리비전 맵의 간단한 목록 형식: ``- `rev` -> `hash` (`url`)``"""
    return ''.join(
        f"- `{entry.svn_revision}` -> `{entry.commit_id[:hash_length]}` (`{entry.svn_url}`)\n"
        for entry in revision_map.entries(descending=descending)
    )


def url_table_path(rev_map_path: Union[str, Path]) -> Path:
    path = Path(rev_map_path)
    return path.with_name(path.name + URL_TABLE_SUFFIX)


def write_binary(revision_map: RevisionMap, path: Union[str, Path],
                 with_url_table: bool = True) -> Tuple[Path, Optional[Path]]:
    """리비전 맵을 .rev_map 파일(과 URL 테이블 파일)로 저장

    Returns:
        (rev_map 파일 경로, URL 테이블 파일 경로 또는 None)
    """
    rev_map_path = Path(path)
    rev_map_path.parent.mkdir(parents=True, exist_ok=True)
    rev_map_path.write_bytes(revision_map.to_bytes())

    urls_path = None
    if with_url_table:
        urls_path = url_table_path(rev_map_path)
        urls_path.write_bytes(revision_map.url_table_bytes())

    logger.info(f"리비전 맵 저장 완료: {rev_map_path} ({len(revision_map)}개 리비전)")
    return rev_map_path, urls_path


def read_binary(path: Union[str, Path]) -> RevisionMap:
    """.rev_map 파일 로드 (옆에 URL 테이블 파일이 있으면 함께 로드)"""
    rev_map_path = Path(path)
    urls_path = url_table_path(rev_map_path)
    url_table = urls_path.read_bytes() if urls_path.exists() else None
    return RevisionMap.from_bytes(rev_map_path.read_bytes(), url_table)


def write_markdown(revision_map: RevisionMap, path: Union[str, Path], config: LogMiningConfig,
                   summaries: Optional[Mapping[str, str]] = None) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_markdown_table(revision_map, config, summaries), encoding='utf-8')
    logger.info(f"리비전 맵 Markdown 저장 완료: {output_path}")
    return output_path
