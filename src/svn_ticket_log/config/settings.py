"""설정 관리 모듈

YAML 설정 파일을 로드하고 검증하는 기능을 제공합니다.
Pydantic을 사용하여 타입 안전성과 검증을 보장하며,
한 번의 실행 동안 변경되지 않는 불변 설정 객체를 만듭니다.
"""

import os
from typing import List, Optional
from pathlib import Path
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
import logging

logger = logging.getLogger(__name__)


class LoggingConfig(BaseModel):
    """로깅 설정"""
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class LogMiningConfig(BaseModel):
    """커밋 로그 분석 전체 설정

    실행 시작 시 한 번 생성되어 각 컴포넌트에 명시적으로 전달됩니다.
    """
    model_config = ConfigDict(frozen=True)

    # 티켓 패턴
    ticket_projects: List[str] = Field(default_factory=list)
    ticket_separator: str = "-"
    ticket_pattern: Optional[str] = None
    leading_ticket_only: bool = False

    # 포함 여부
    include_merge_commits: bool = False
    include_cherry_picks: bool = False
    include_tags: bool = False
    prefer_upstream: bool = True

    # 탐색 범위
    revision_floor: Optional[int] = Field(default=None, ge=0)
    max_svn_range: int = Field(default=20, ge=1)

    # 출력 형식
    ticket_prefix: str = ""
    hash_length: int = Field(default=10, ge=7, le=40)
    markdown_descending: bool = False
    markdown_summary: bool = True
    git_url_base: Optional[str] = None

    verbose: bool = False
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator('ticket_projects')
    @classmethod
    def normalize_projects(cls, v):
        # 패턴 자체의 검증은 ticket_pattern.build_ticket_regex에서 수행
        return [project.strip() for project in v]

    def with_overrides(self, **overrides) -> 'LogMiningConfig':
        """일부 값을 바꾼 새 설정 객체 반환 (CLI 인자 반영용)"""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return self.model_copy(update=values)


def get_default_config() -> LogMiningConfig:
    """기본 설정 반환"""
    return LogMiningConfig()


def load_config(config_path: str) -> LogMiningConfig:
    """설정 파일 로드

    Args:
        config_path: 설정 파일 경로

    Returns:
        로드된 설정 객체

    Raises:
        FileNotFoundError: 설정 파일이 존재하지 않는 경우
        ValueError: 설정 파일 형식이 잘못된 경우
        MalformedTicketPatternError: 티켓 패턴 설정이 잘못된 경우
    """
    # 순환 import 방지
    from svn_ticket_log.commit_graph.ticket_pattern import build_ticket_regex
    from svn_ticket_log.exceptions import MalformedTicketPatternError

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        config = LogMiningConfig(**config_data)
        # 잘못된 티켓 패턴은 부분 적용이 불가능하므로 로드 시점에 실패
        build_ticket_regex(config)

        logger.info(f"Loaded configuration from: {config_path}")
        return config

    except MalformedTicketPatternError:
        raise
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format: {e}")
    except Exception as e:
        raise ValueError(f"Failed to load config: {e}")


def get_default_config_path() -> Optional[str]:
    """기본 설정 파일 경로 반환 (없으면 None)"""
    # 현재 디렉토리에서 설정 파일 찾기
    current_dir_config = "./svn-ticket-log.yml"
    if os.path.exists(current_dir_config):
        return current_dir_config

    # 패키지에 포함된 기본 설정 파일
    package_config = Path(__file__).parent / "svn-ticket-log-config.yml"
    if package_config.exists():
        return str(package_config)

    return None
