"""질의 결과 출력 모듈

list / compare / search 결과를 Markdown, 일반 텍스트, 티켓 목록, JSON 으로 변환합니다.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from svn_ticket_log.commit_graph.commit_record import CommitRecord
from svn_ticket_log.commit_graph.ticket_id import TicketId
from svn_ticket_log.commit_graph.ticket_pattern import format_ticket
from svn_ticket_log.config.settings import LogMiningConfig
from svn_ticket_log.constants import MERGE_COMMIT_MARKER_STR, NO_TICKET_STR
from svn_ticket_log.query.results import (
    CompareResult,
    IncludedCommit,
    ListResult,
    SearchReport,
    TicketGroup,
)

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("markdown", "plain", "tickets", "json")


class ReportWriter:
    """질의 결과 렌더러"""

    def __init__(self, config: LogMiningConfig, output_format: str = "markdown",
                 show_commits: bool = False):
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {output_format} (choose from {', '.join(OUTPUT_FORMATS)})")
        self.config = config
        self.output_format = output_format
        self.show_commits = show_commits
        self._lines: List[str] = []

    # 공통 표기

    def _code(self, text: str) -> str:
        return f"`{text}`" if self.output_format == "markdown" else text

    def _indent(self, depth: int) -> str:
        return ("\t" if self.output_format == "markdown" else "  ") * depth

    def _bullet(self, text: str, depth: int = 0) -> None:
        self._lines.append(f"{self._indent(depth)}- {text}")

    def _heading(self, text: str) -> None:
        if self._lines:
            self._lines.append("")
        self._lines.append(f"## {text}" if self.output_format == "markdown" else text)

    def _ticket_label(self, ticket: Optional[TicketId]) -> str:
        if ticket is None:
            return NO_TICKET_STR
        return format_ticket(ticket, self.config.ticket_prefix)

    def _commit_label(self, commit: CommitRecord) -> str:
        label = self._code(commit.short_id(self.config.hash_length))
        if commit.is_likely_merge:
            label += MERGE_COMMIT_MARKER_STR
        return label

    def _commit_tree(self, commits: Sequence[IncludedCommit], depth: int) -> None:
        for included in commits:
            for offset, _, node in included.walk():
                self._bullet(self._commit_label(node.commit), depth + offset)

    def _ticket_groups(self, groups: Sequence[TicketGroup]) -> None:
        for group in groups:
            label = self._ticket_label(group.ticket)
            if self.show_commits:
                self._bullet(f"{label}:")
                self._commit_tree(group.commits, 1)
            else:
                self._bullet(f"{label} ({len(group.commits)})")

    def _finish(self) -> str:
        text = "\n".join(self._lines) + "\n"
        self._lines = []
        return text

    @staticmethod
    def _ticket_list(tickets: Sequence[TicketId], template: str) -> str:
        return "".join(f"{format_ticket(ticket, template)}\n" for ticket in tickets)

    @staticmethod
    def _json(result: Any) -> str:
        return json.dumps(result.to_dict(), ensure_ascii=False, indent=2) + "\n"

    # 결과별 렌더링

    def render_list(self, result: ListResult, revspec: Optional[str] = None) -> str:
        if self.output_format == "json":
            return self._json(result)
        if self.output_format == "tickets":
            return self._ticket_list(result.tickets, self.config.ticket_prefix)

        if revspec:
            self._lines.append(f"Tickets in {self._code(revspec)}:")
        self._heading(f"Tickets ({len(result.tickets)} total)")
        self._ticket_groups(result.groups)
        if result.excluded_merge_ids:
            self._lines.append("")
            self._lines.append(f"Merge commits excluded: {len(result.excluded_merge_ids)}")
        return self._finish()

    def render_compare(self, result: CompareResult) -> str:
        if self.output_format == "json":
            return self._json(result)
        if self.output_format == "tickets":
            return self._ticket_list(result.tickets_only_a, self.config.ticket_prefix)

        name_a, name_b = self._code(result.name_a), self._code(result.name_b)
        self._lines.append(f"Comparing the following two references: {name_a} against {name_b}")

        self._heading(f"Tickets only on {name_a} ({len(result.tickets_only_a)} total)")
        self._ticket_groups(self._groups_for(result.groups_a, result.tickets_only_a))

        self._heading(f"Tickets only on {name_b} ({len(result.tickets_only_b)} total)")
        self._ticket_groups(self._groups_for(result.groups_b, result.tickets_only_b))

        self._heading(f"Tickets on both {name_a} and {name_b} ({len(result.tickets_both)} total)")
        groups_a = {group.ticket: group for group in result.groups_a}
        groups_b = {group.ticket: group for group in result.groups_b}
        for ticket in result.tickets_both:
            commits_a, commits_b = groups_a[ticket].commits, groups_b[ticket].commits
            label = self._ticket_label(ticket)
            if self.show_commits:
                self._bullet(f"{label}:")
                self._bullet(f"On {name_a}:", 1)
                self._commit_tree(commits_a, 2)
                self._bullet(f"On {name_b}:", 1)
                self._commit_tree(commits_b, 2)
            else:
                self._bullet(f"{label} ({len(commits_a)} : {len(commits_b)})")

        removed = len(result.removed_a) + len(result.removed_b)
        if removed:
            self._lines.append("")
            self._lines.append(f"Duplicated cherry-picks/merges removed: {removed}")
        return self._finish()

    @staticmethod
    def _groups_for(groups: Sequence[TicketGroup], tickets: Sequence[TicketId]) -> List[TicketGroup]:
        """한쪽에만 있는 티켓 묶음 (티켓 없는 커밋 묶음 포함)"""
        wanted = set(tickets)
        return [group for group in groups if group.ticket is None or group.ticket in wanted]

    def render_search(self, report: SearchReport) -> str:
        if self.output_format == "json":
            return self._json(report)
        if self.output_format == "tickets":
            return "".join(f"{name}\n" for name in report.matching_refs)

        self._lines.append("Searching for all locations where any commits were merged for the following:")
        for ticket in sorted(report.targets):
            self._bullet(self._ticket_label(ticket))

        self._heading("Commit list being searched, with commits that merge them elsewhere as sub-entries:")
        self._commit_tree(report.matching_commits, 0)

        self._heading("Results:")
        for position, group in enumerate(report.ref_groups):
            self._bullet(f"Set {position}:")
            self._bullet("Commits:", 1)
            for commit_id in group.commit_ids:
                # 참조 트리의 레코드와 같은 표기를 위해 결과 안에서 레코드를 찾음
                record = self._find_record(report, commit_id)
                label = self._commit_label(record) if record else self._code(commit_id[:self.config.hash_length])
                self._bullet(label, 2)
            self._bullet("Branches:", 1)
            for ref_name in sorted(group.ref_names):
                self._bullet(self._code(ref_name), 2)

        if report.missing_tickets:
            self._lines.append("")
            missing = ", ".join(self._ticket_label(ticket) for ticket in sorted(report.missing_tickets))
            self._lines.append(f"Not found on any ref: {missing}")
        return self._finish()

    @staticmethod
    def _find_record(report: SearchReport, commit_id: str) -> Optional[CommitRecord]:
        for included in report.matching_commits:
            for record in included.flatten():
                if record.id == commit_id:
                    return record
        return None


def write_output(text: str, output_path: Optional[Union[str, Path]] = None) -> None:
    """결과를 파일 또는 표준 출력으로 기록"""
    if output_path is None:
        print(text, end="")
        return

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    logger.info(f"결과 저장 완료: {path}")
