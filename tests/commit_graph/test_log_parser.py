"""git log 출력 파서 테스트 모듈"""

import pytest

from svn_ticket_log.commit_graph.log_parser import (
    LOG_PRETTY_FORMAT,
    parse_commit_id_list,
    parse_log_output,
)
from svn_ticket_log.exceptions import LogParseError

HASH_A = "a" * 39 + "1"
HASH_B = "b" * 39 + "2"
HASH_C = "C" * 39 + "3"
UUID = "0a1b2c3d-4e5f-6071-8293-a4b5c6d7e8f9"

SAMPLE_LOG = f"""CLOG-COMMIT-DELIMITER
{HASH_B}
{HASH_A}
Jane Doe
2024-03-01T10:15:00+09:00
PROJ-2 Fix parser

Longer description
git-svn-id: https://svn/repo/trunk@12 {UUID}

CLOG-FILES

src/parser.py
docs/CLOG-FILES.md
CLOG-COMMIT-DELIMITER
{HASH_A}

John Doe
2024-02-29T09:00:00Z
Initial import
CLOG-FILES
README
"""


@pytest.mark.unit
class TestParseLogOutput:
    """parse_log_output 테스트"""

    def test_parse_commits(self):
        """커밋 블록 파싱"""
        commits = parse_log_output(SAMPLE_LOG)

        assert [c.id for c in commits] == [HASH_B, HASH_A]

        newest = commits[0]
        assert newest.parent_ids == (HASH_A,)
        assert newest.author == "Jane Doe"
        assert newest.timestamp.isoformat() == "2024-03-01T10:15:00+09:00"
        assert newest.summary == "PROJ-2 Fix parser"
        assert newest.full_message.endswith(f"git-svn-id: https://svn/repo/trunk@12 {UUID}")
        assert newest.changed_paths == ("src/parser.py", "docs/CLOG-FILES.md")

    def test_root_commit_has_no_parents(self):
        """루트 커밋의 부모 줄은 비어 있음"""
        root = parse_log_output(SAMPLE_LOG)[1]

        assert root.parent_ids == ()
        assert root.full_message == "Initial import"
        assert root.changed_paths == ("README",)
        assert root.timestamp.utcoffset().total_seconds() == 0

    def test_ids_are_lower_cased(self):
        """해시 소문자 정규화"""
        log = f"CLOG-COMMIT-DELIMITER\n{HASH_C}\n\nX\n2024-01-01T00:00:00Z\nmsg\nCLOG-FILES\n"

        assert parse_log_output(log)[0].id == HASH_C.lower()

    def test_duplicate_commits_keep_first(self):
        """--reflog 로 중복된 커밋은 첫 번째만 유지"""
        block = f"CLOG-COMMIT-DELIMITER\n{HASH_A}\n\nX\n2024-01-01T00:00:00Z\nmsg\nCLOG-FILES\n"

        assert len(parse_log_output(block + block)) == 1

    def test_empty_output(self):
        assert parse_log_output("") == []

    @pytest.mark.parametrize("block", [
        "CLOG-COMMIT-DELIMITER\nnot-a-hash\n\nX\n2024-01-01T00:00:00Z\nmsg\n",
        f"CLOG-COMMIT-DELIMITER\n{HASH_A}\nbad-parent\nX\n2024-01-01T00:00:00Z\nmsg\n",
        f"CLOG-COMMIT-DELIMITER\n{HASH_A}\n\nX\nyesterday\nmsg\n",
        f"CLOG-COMMIT-DELIMITER\n{HASH_A}\n",
    ])
    def test_malformed_blocks(self, block):
        """형식 오류는 LogParseError"""
        with pytest.raises(LogParseError):
            parse_log_output(block)

    def test_pretty_format_matches_parser(self):
        """수집기에 전달하는 형식 문자열"""
        assert LOG_PRETTY_FORMAT.startswith("format:CLOG-COMMIT-DELIMITER%n%H%n%P")
        assert LOG_PRETTY_FORMAT.endswith("%B%nCLOG-FILES")


@pytest.mark.unit
class TestParseCommitIdList:
    """parse_commit_id_list 테스트"""

    def test_hash_list(self):
        assert parse_commit_id_list(f"{HASH_B}\n\n{HASH_C}\n") == [HASH_B, HASH_C.lower()]

    def test_invalid_line(self):
        with pytest.raises(LogParseError):
            parse_commit_id_list("fatal: bad revision")
