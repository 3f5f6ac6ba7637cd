"""SVN 리비전 맵 패키지

리비전 맵 생성과 Markdown/바이너리 직렬화를 제공합니다.
"""

from .revision_entry import RevisionCollision, RevisionMapEntry
from .revision_map import RevisionMap, build_revision_map
from .revision_map_writer import (
    read_binary,
    render_markdown_list,
    render_markdown_table,
    write_binary,
    write_markdown,
)

__all__ = [
    'RevisionCollision',
    'RevisionMapEntry',
    'RevisionMap',
    'build_revision_map',
    'read_binary',
    'render_markdown_list',
    'render_markdown_table',
    'write_binary',
    'write_markdown',
]
