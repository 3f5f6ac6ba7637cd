"""티켓 패턴 모듈

설정으로부터 티켓 정규식을 만들고 커밋 텍스트에서 티켓을 추출합니다.
잘못된 설정은 어떤 처리도 시작하기 전에 MalformedTicketPatternError로 실패합니다.
"""

import re
from typing import List, Pattern

from svn_ticket_log.config.settings import LogMiningConfig
from svn_ticket_log.exceptions import MalformedTicketPatternError
from .ticket_id import TicketId

PROJECT_KEY_REGEX = re.compile(r'^[A-Za-z][A-Za-z0-9_]*$')
# 요약 줄 맨 앞의 티켓 (앞의 "Pull request #123 ..." 는 건너뜀)
LEADING_PREFIX = r'^\s*(?:Pull request #\d+.*?)?'


def _validate_separator(separator: str) -> None:
    if not separator:
        raise MalformedTicketPatternError("Ticket separator must not be empty")
    if len(separator) > 3 or any(ch.isalnum() or ch.isspace() for ch in separator):
        raise MalformedTicketPatternError(
            f"Ticket separator must be 1-3 punctuation characters: {separator!r}"
        )


def build_ticket_regex(config: LogMiningConfig) -> Pattern:
    """설정에서 티켓 정규식 생성

    캡처 그룹 1이 티켓 전체를 가리킵니다.

    Raises:
        MalformedTicketPatternError: 패턴 설정이 잘못된 경우
    """
    if config.ticket_pattern is not None:
        try:
            regex = re.compile(config.ticket_pattern)
        except re.error as e:
            raise MalformedTicketPatternError(f"Invalid ticket pattern {config.ticket_pattern!r}: {e}")
        if regex.groups != 1:
            raise MalformedTicketPatternError(
                f"Ticket pattern must have exactly one capturing group, found {regex.groups}"
            )
        return regex

    separator = config.ticket_separator
    _validate_separator(separator)
    escaped_separator = re.escape(separator)

    if not config.ticket_projects:
        # 대문자 키만 인정하여 "utf-8" 같은 일반 단어와 구분
        return re.compile(rf'\b([A-Z][A-Z0-9_]+{escaped_separator}[1-9][0-9]*)\b')

    for project in config.ticket_projects:
        if not PROJECT_KEY_REGEX.match(project):
            raise MalformedTicketPatternError(f"Invalid ticket project key: {project!r}")

    alternatives = '|'.join(re.escape(project) for project in config.ticket_projects)
    return re.compile(
        rf'\b((?:{alternatives}){escaped_separator}[1-9][0-9]*)\b',
        re.IGNORECASE,
    )


class TicketMatcher:
    """컴파일된 티켓 정규식으로 티켓을 추출하는 클래스"""

    def __init__(self, config: LogMiningConfig):
        self.regex = build_ticket_regex(config)
        try:
            self.leading_regex = re.compile(LEADING_PREFIX + f'(?:{self.regex.pattern})', self.regex.flags)
        except re.error as e:
            raise MalformedTicketPatternError(f"Ticket pattern cannot be anchored to the summary: {e}")
        self.leading_only = config.leading_ticket_only

    def find_all(self, text: str) -> List[TicketId]:
        """텍스트에 나타난 모든 티켓 (등장 순서, 중복 제거)"""
        found: List[TicketId] = []
        for match in self.regex.finditer(text):
            ticket = TicketId(match.group(1))
            if ticket not in found:
                found.append(ticket)
        return found

    def find_leading(self, summary: str) -> List[TicketId]:
        """요약 줄 맨 앞의 티켓"""
        match = self.leading_regex.match(summary)
        if not match or not match.group(1):
            return []
        return [TicketId(match.group(1))]

    def extract(self, summary: str, body_lines: List[str]) -> List[TicketId]:
        """설정된 모드에 따라 요약/본문에서 티켓 추출"""
        if self.leading_only:
            return self.find_leading(summary)
        tickets = self.find_all(summary)
        for line in body_lines:
            for ticket in self.find_all(line):
                if ticket not in tickets:
                    tickets.append(ticket)
        return tickets


def format_ticket(ticket: TicketId, template: str = "") -> str:
    """출력 시점의 티켓 표기

    템플릿에 ``{ticket}`` 이 있으면 치환하고, 없으면 접두어로 붙입니다.
    예: ``https://jira.example.com/browse/{ticket}``
    """
    if '{ticket}' in template:
        return template.replace('{ticket}', ticket.value)
    return f"{template}{ticket.value}"
