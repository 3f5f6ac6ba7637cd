"""리비전 맵 바이너리 형식

git-svn 의 ``.rev_map.<uuid>`` 파일과 같은 레이아웃을 읽고 씁니다.

- 레코드당 24바이트: 4바이트 big-endian 부호 없는 리비전 + 20바이트 SHA-1 원본 바이트
- 리비전 오름차순
- git-svn 은 마지막 리비전에 커밋이 없을 때 SHA-1 이 0으로 채워진 패딩 레코드를 남김

.rev_map 에는 URL 자리가 없으므로 URL은 별도의 URL 테이블에 저장합니다::

    u32 blob_len
    blob: (u16 길이 + UTF-8 문자열) 반복, 같은 URL은 한 번만
    u32 count
    u32 blob 오프셋 * count   (rev_map 레코드 순서와 동일)
"""

import struct
from typing import Iterable, List, Optional, Sequence, Tuple

from svn_ticket_log.constants import (
    MAX_SVN_REVISION,
    REV_MAP_RECORD_SIZE,
    SHA1_HASH_ASCII_LENGTH,
    SHA1_HASH_LENGTH,
)
from .revision_entry import RevisionMapEntry

_REVISION_STRUCT = struct.Struct(">I")
_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_ZERO_SHA1 = bytes(SHA1_HASH_LENGTH)


def _commit_id_bytes(commit_id: str) -> bytes:
    if len(commit_id) != SHA1_HASH_ASCII_LENGTH:
        raise ValueError(f"Commit id must be a full SHA-1 hash: {commit_id!r}")
    try:
        return bytes.fromhex(commit_id)
    except ValueError as e:
        raise ValueError(f"Commit id is not hexadecimal: {commit_id!r}") from e


def encode_rev_map(entries: Iterable[RevisionMapEntry]) -> bytes:
    """엔트리 목록을 .rev_map 바이트로 변환 (리비전 오름차순으로 정렬)

    Raises:
        ValueError: 리비전 범위를 벗어나거나 커밋 해시가 전체 SHA-1 이 아닌 경우
    """
    chunks = []
    for entry in sorted(entries, key=lambda e: e.svn_revision):
        if not 0 <= entry.svn_revision <= MAX_SVN_REVISION:
            raise ValueError(f"SVN revision out of range for rev_map: {entry.svn_revision}")
        chunks.append(_REVISION_STRUCT.pack(entry.svn_revision))
        chunks.append(_commit_id_bytes(entry.commit_id))
    return b''.join(chunks)


def decode_rev_map(data: bytes) -> List[Tuple[int, str]]:
    """.rev_map 바이트를 (리비전, 커밋 해시) 목록으로 변환

    SHA-1 이 모두 0인 패딩 레코드는 건너뜁니다.

    Raises:
        ValueError: 데이터 길이가 레코드 크기의 배수가 아닌 경우
    """
    if len(data) % REV_MAP_RECORD_SIZE != 0:
        raise ValueError(
            f"Corrupted rev_map: length {len(data)} is not a multiple of {REV_MAP_RECORD_SIZE}"
        )

    records: List[Tuple[int, str]] = []
    for offset in range(0, len(data), REV_MAP_RECORD_SIZE):
        (revision,) = _REVISION_STRUCT.unpack_from(data, offset)
        sha1 = data[offset + _REVISION_STRUCT.size:offset + REV_MAP_RECORD_SIZE]
        if sha1 == _ZERO_SHA1:
            continue
        records.append((revision, sha1.hex()))
    return records


def encode_url_table(entries: Iterable[RevisionMapEntry]) -> bytes:
    """URL 테이블 생성 (레코드 순서는 encode_rev_map 과 동일)"""
    ordered = sorted(entries, key=lambda e: e.svn_revision)

    blob = bytearray()
    offsets_by_url = {}
    record_offsets = []
    for entry in ordered:
        if entry.svn_url not in offsets_by_url:
            url_bytes = entry.svn_url.encode('utf-8')
            if len(url_bytes) > 0xFFFF:
                raise ValueError(f"SVN URL is too long for the URL table: {entry.svn_url[:80]}...")
            offsets_by_url[entry.svn_url] = len(blob)
            blob += _U16.pack(len(url_bytes))
            blob += url_bytes
        record_offsets.append(offsets_by_url[entry.svn_url])

    parts = [_U32.pack(len(blob)), bytes(blob), _U32.pack(len(record_offsets))]
    parts.extend(_U32.pack(offset) for offset in record_offsets)
    return b''.join(parts)


def _read_exact(data: bytes, offset: int, size: int, what: str) -> bytes:
    chunk = data[offset:offset + size]
    if len(chunk) < size:
        raise ValueError(f"Corrupted URL table: unexpected end of data reading {what}")
    return chunk


def _read_blob_string(blob: bytes, offset: int) -> str:
    length_bytes = _read_exact(blob, offset, _U16.size, "string length")
    (length,) = _U16.unpack(length_bytes)
    return _read_exact(blob, offset + _U16.size, length, "string").decode('utf-8')


def decode_url_table(data: bytes) -> List[str]:
    """URL 테이블을 레코드별 URL 목록으로 변환

    Raises:
        ValueError: 테이블이 잘렸거나 오프셋이 범위를 벗어난 경우
    """
    try:
        (blob_len,) = _U32.unpack(_read_exact(data, 0, _U32.size, "blob length"))
        blob = _read_exact(data, _U32.size, blob_len, "blob")
        position = _U32.size + blob_len
        (count,) = _U32.unpack(_read_exact(data, position, _U32.size, "record count"))
        position += _U32.size

        urls: List[str] = []
        cache = {}
        for _ in range(count):
            (offset,) = _U32.unpack(_read_exact(data, position, _U32.size, "offset"))
            position += _U32.size
            if offset not in cache:
                cache[offset] = _read_blob_string(blob, offset)
            urls.append(cache[offset])
        return urls
    except (struct.error, UnicodeDecodeError) as e:
        raise ValueError(f"Corrupted URL table: {e}") from e


def decode_entries(rev_map: bytes, url_table: Optional[bytes] = None) -> List[RevisionMapEntry]:
    """rev_map 과 (선택) URL 테이블에서 엔트리 목록 복원"""
    records = decode_rev_map(rev_map)
    urls: Sequence[str] = decode_url_table(url_table) if url_table is not None else [""] * len(records)
    if len(urls) != len(records):
        raise ValueError(
            f"URL table has {len(urls)} entries but rev_map has {len(records)} records"
        )
    return [
        RevisionMapEntry(svn_revision=revision, commit_id=commit_id, svn_url=url)
        for (revision, commit_id), url in zip(records, urls)
    ]
