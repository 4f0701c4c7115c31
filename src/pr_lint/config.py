"""
Configuration Management

시스템 설정 관리
"""

import os
import re
import yaml
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging


def _env_list(name: str, default: List[str]) -> List[str]:
    """콤마로 구분된 환경 변수를 리스트로 변환"""
    value = os.getenv(name)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


@dataclass
class ThresholdConfig:
    """PR 크기 관련 임계값"""
    large_pr_lines: int = 500
    very_large_pr_lines: int = 1000
    needs_tests_min_lines: int = 50
    min_description_length: int = 0  # 0이면 비활성화


@dataclass
class PathConfig:
    """경로 분류 설정"""
    source_dirs: List[str] = field(default_factory=lambda: ["Sources/"])
    test_dirs: List[str] = field(default_factory=lambda: ["Tests/"])
    source_extensions: List[str] = field(default_factory=lambda: [".swift"])
    manifest_files: List[str] = field(default_factory=lambda: ["Package.swift"])
    doc_files: List[str] = field(default_factory=lambda: ["README.md", "CHANGELOG.md"])
    doc_dirs: List[str] = field(default_factory=lambda: ["docs/", "Documentation/"])
    generated_markers: List[str] = field(default_factory=lambda: ["generated", ".pb."])
    test_file_template: str = "{stem}Tests{ext}"
    test_exempt_prefixes: List[str] = field(default_factory=lambda: ["Generated", "Mock", "_"])


@dataclass
class PatternConfig:
    """diff 검사용 정규식"""
    title_pattern: str = (
        r"^(feat|fix|docs|style|refactor|perf|test|build|ci|chore|revert)"
        r"(\([\w\-./ ]+\))?!?: \S.*"
    )
    todo_pattern: str = r"\b(TODO|FIXME)\b"
    print_pattern: str = r"\b(print|debugPrint|dump|NSLog)\s*\("
    force_unwrap_pattern: str = r"\btry!|\bas!|[\w)\]]!(?!=)"
    dependency_pattern: str = r"\.package\s*\("
    public_declaration_pattern: str = r"^\s*(@\w+\s+)*(public|open)\s"


@dataclass
class PolicyConfig:
    """규칙 정책 설정"""
    changelog_policy: str = "warn"  # 'off', 'warn', 'fail'
    changelog_file: str = "CHANGELOG.md"
    trivial_marker: str = "#trivial"
    check_title: bool = True
    check_tests: bool = True
    check_added_lines: bool = True


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: int = 30
    comment_marker: str = "<!-- pr-lint-report -->"


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    paths: PathConfig = field(default_factory=PathConfig)
    patterns: PatternConfig = field(default_factory=PatternConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        thresholds, paths, policy = ThresholdConfig(), PathConfig(), PolicyConfig()
        github, log = GitHubConfig(), LoggingConfig()
        return cls(
            thresholds=ThresholdConfig(
                large_pr_lines=_env_int("PR_LINT_LARGE_PR_LINES", thresholds.large_pr_lines),
                very_large_pr_lines=_env_int("PR_LINT_VERY_LARGE_PR_LINES", thresholds.very_large_pr_lines),
                needs_tests_min_lines=_env_int("PR_LINT_NEEDS_TESTS_MIN_LINES", thresholds.needs_tests_min_lines),
                min_description_length=_env_int(
                    "PR_LINT_MIN_DESCRIPTION_LENGTH", thresholds.min_description_length
                ),
            ),
            paths=PathConfig(
                source_dirs=_env_list("PR_LINT_SOURCE_DIRS", paths.source_dirs),
                test_dirs=_env_list("PR_LINT_TEST_DIRS", paths.test_dirs),
                source_extensions=_env_list("PR_LINT_SOURCE_EXTENSIONS", paths.source_extensions),
                manifest_files=_env_list("PR_LINT_MANIFEST_FILES", paths.manifest_files),
                doc_files=_env_list("PR_LINT_DOC_FILES", paths.doc_files),
                doc_dirs=_env_list("PR_LINT_DOC_DIRS", paths.doc_dirs),
                generated_markers=_env_list("PR_LINT_GENERATED_MARKERS", paths.generated_markers),
                test_file_template=os.getenv("PR_LINT_TEST_FILE_TEMPLATE", paths.test_file_template),
                test_exempt_prefixes=_env_list("PR_LINT_TEST_EXEMPT_PREFIXES", paths.test_exempt_prefixes),
            ),
            patterns=PatternConfig(),
            policy=PolicyConfig(
                changelog_policy=os.getenv("PR_LINT_CHANGELOG_POLICY", policy.changelog_policy).lower(),
                changelog_file=os.getenv("PR_LINT_CHANGELOG_FILE", policy.changelog_file),
                trivial_marker=os.getenv("PR_LINT_TRIVIAL_MARKER", policy.trivial_marker),
                check_title=_env_bool("PR_LINT_CHECK_TITLE", policy.check_title),
                check_tests=_env_bool("PR_LINT_CHECK_TESTS", policy.check_tests),
                check_added_lines=_env_bool("PR_LINT_CHECK_ADDED_LINES", policy.check_added_lines),
            ),
            github=GitHubConfig(
                # Actions exposes these for the running workflow
                token=os.getenv("GITHUB_TOKEN"),
                api_base_url=os.getenv("GITHUB_API_URL", github.api_base_url),
                timeout_seconds=_env_int("GITHUB_TIMEOUT", github.timeout_seconds),
                comment_marker=os.getenv("PR_LINT_COMMENT_MARKER", github.comment_marker),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", log.level),
                format=os.getenv("LOG_FORMAT", log.format),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=_env_int("LOG_MAX_SIZE", log.max_file_size),
                backup_count=_env_int("LOG_BACKUP_COUNT", log.backup_count),
            ),
            debug=_env_bool("DEBUG", False),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "AppConfig":
        """딕셔너리에서 설정 생성"""
        github = dict(config_data.get('github', {}))
        # 토큰은 파일 대신 환경 변수 우선
        github.setdefault('token', os.getenv("GITHUB_TOKEN"))

        return cls(
            thresholds=ThresholdConfig(**config_data.get('thresholds', {})),
            paths=PathConfig(**config_data.get('paths', {})),
            patterns=PatternConfig(**config_data.get('patterns', {})),
            policy=PolicyConfig(**config_data.get('policy', {})),
            github=GitHubConfig(**github),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # 임계값 검증
        if self.thresholds.large_pr_lines <= 0 or self.thresholds.very_large_pr_lines <= 0:
            errors.append("PR size thresholds must be positive")
        elif self.thresholds.large_pr_lines > self.thresholds.very_large_pr_lines:
            errors.append("large_pr_lines cannot exceed very_large_pr_lines")

        if self.thresholds.needs_tests_min_lines < 0:
            errors.append("needs_tests_min_lines must be non-negative")

        if self.thresholds.min_description_length < 0:
            errors.append("min_description_length must be non-negative")

        # 정책 검증
        valid_policies = {'off', 'warn', 'fail'}
        if self.policy.changelog_policy not in valid_policies:
            errors.append(f"Invalid changelog policy: {self.policy.changelog_policy}")

        # 정규식 검증
        for name, pattern in asdict(self.patterns).items():
            try:
                re.compile(pattern)
            except re.error as e:
                errors.append(f"Invalid pattern {name}: {e}")

        if '{stem}' not in self.paths.test_file_template:
            errors.append("test_file_template must contain '{stem}'")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        data = asdict(self)
        # 보안상 토큰은 제외
        data['github'].pop('token', None)
        return data


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def update_config(self, **kwargs) -> None:
        """설정 업데이트"""
        config_dict = self._config.to_dict()
        config_dict['github']['token'] = self._config.github.token

        for key, value in kwargs.items():
            if '.' in key:
                # 중첩된 설정 (예: 'thresholds.large_pr_lines')
                section, name = key.split('.', 1)
                if section in config_dict:
                    config_dict[section][name] = value
            else:
                # 최상위 설정
                config_dict[key] = value

        self._config = AppConfig.from_dict(config_dict)
        self._config.validate()
        self._setup_logging()

    def _setup_logging(self) -> None:
        """로깅 설정"""
        logging.basicConfig(
            level=getattr(logging, self._config.logging.level.upper()),
            format=self._config.logging.format,
        )
        logging.getLogger().setLevel(getattr(logging, self._config.logging.level.upper()))

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            root_logger = logging.getLogger()
            for existing in root_logger.handlers:
                if isinstance(existing, RotatingFileHandler) and \
                        existing.baseFilename == str(Path(self._config.logging.file_path).resolve()):
                    return

            handler = RotatingFileHandler(
                self._config.logging.file_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))

            # 루트 로거에 핸들러 추가
            root_logger.addHandler(handler)


# 전역 설정 관리자 인스턴스 (최초 접근 시 생성)
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """전역 설정 관리자 반환"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """현재 설정 반환"""
    return get_config_manager().config


def update_config(**kwargs) -> None:
    """설정 업데이트"""
    get_config_manager().update_config(**kwargs)
