"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
import logging
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
from pathlib import Path


class ConfigurationError(ValueError):
    """Configuration validation failed"""


@dataclass
class LLMConfig:
    """LLM 설정"""
    provider: str = "openai"  # 'openai' or 'transformers'
    model_name: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    api_base_url: str = "https://api.openai.com/v1"
    max_tokens: int = 1024
    temperature: float = 0.0
    timeout_seconds: int = 120


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    host: str = "github.com"
    timeout_seconds: int = 30


@dataclass
class GiteaConfig:
    """Gitea API 설정"""
    token: Optional[str] = None
    base_url: str = "https://gitea.com"
    timeout_seconds: int = 30

    @property
    def host(self) -> str:
        return self.base_url.split('://', 1)[-1].rstrip('/')


@dataclass
class VCSConfig:
    """VCS 공급자 설정"""
    provider: str = "github"  # 'github' or 'gitea'
    github: GitHubConfig = field(default_factory=GitHubConfig)
    gitea: GiteaConfig = field(default_factory=GiteaConfig)

    @property
    def token(self) -> Optional[str]:
        return self.gitea.token if self.provider.lower() == 'gitea' else self.github.token

    @property
    def host(self) -> str:
        return self.gitea.host if self.provider.lower() == 'gitea' else self.github.host


@dataclass
class ReviewConfig:
    """리뷰 생성 설정"""
    review_prompt: Optional[str] = None
    architecture_prompt: Optional[str] = None
    max_concurrent_oracle_calls: int = 1
    no_issues_message: str = "✅ AI Review Complete: No issues found."


@dataclass
class WorkspaceConfig:
    """저장소 작업 디렉토리 설정"""
    root_dir: str = "./repos"
    git_binary: str = "git"


@dataclass
class DispatchConfig:
    """이벤트 처리 워커 풀 설정"""
    max_workers: int = 4
    max_pending: int = 16


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
    llm: LLMConfig = field(default_factory=LLMConfig)
    vcs: VCSConfig = field(default_factory=VCSConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        return cls(
            llm=LLMConfig(
                provider=os.getenv("LLM_PROVIDER", "openai"),
                model_name=os.getenv("LLM_MODEL", "gpt-4o-mini"),
                api_key=os.getenv("LLM_API_KEY"),
                api_base_url=os.getenv("LLM_API_URL", "https://api.openai.com/v1"),
                max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1024")),
                temperature=float(os.getenv("LLM_TEMPERATURE", "0.0")),
                timeout_seconds=int(os.getenv("LLM_TIMEOUT", "120")),
            ),
            vcs=VCSConfig(
                provider=os.getenv("VCS_PROVIDER", "github"),
                github=GitHubConfig(
                    token=os.getenv("GITHUB_TOKEN"),
                    api_base_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
                    host=os.getenv("GITHUB_HOST", "github.com"),
                    timeout_seconds=int(os.getenv("GITHUB_TIMEOUT", "30")),
                ),
                gitea=GiteaConfig(
                    token=os.getenv("GITEA_TOKEN"),
                    base_url=os.getenv("GITEA_BASE_URL", "https://gitea.com"),
                    timeout_seconds=int(os.getenv("GITEA_TIMEOUT", "30")),
                ),
            ),
            review=ReviewConfig(
                review_prompt=os.getenv("REVIEW_PROMPT"),
                architecture_prompt=os.getenv("ARCHITECTURE_PROMPT"),
                max_concurrent_oracle_calls=int(os.getenv("MAX_CONCURRENT_LLM_CALLS", "1")),
            ),
            workspace=WorkspaceConfig(
                root_dir=os.getenv("WORKSPACE_ROOT", "./repos"),
                git_binary=os.getenv("GIT_BINARY", "git"),
            ),
            dispatch=DispatchConfig(
                max_workers=int(os.getenv("REVIEW_WORKERS", "4")),
                max_pending=int(os.getenv("REVIEW_MAX_PENDING", "16")),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            debug=os.getenv("DEBUG", "false").lower() == "true",
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
        vcs_data = dict(config_data.get('vcs', {}))
        github_data = vcs_data.pop('github', {}) or {}
        gitea_data = vcs_data.pop('gitea', {}) or {}

        return cls(
            llm=LLMConfig(**config_data.get('llm', {})),
            vcs=VCSConfig(
                github=GitHubConfig(**github_data),
                gitea=GiteaConfig(**gitea_data),
                **vcs_data,
            ),
            review=ReviewConfig(**config_data.get('review', {})),
            workspace=WorkspaceConfig(**config_data.get('workspace', {})),
            dispatch=DispatchConfig(**config_data.get('dispatch', {})),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # VCS 토큰 필수 확인
        provider = self.vcs.provider.lower()
        if provider not in {'github', 'gitea'}:
            errors.append(f"Unsupported VCS provider: {self.vcs.provider}")
        elif not self.vcs.token:
            errors.append(f"{provider} provider selected but its token is not configured")

        if self.llm.provider.lower() not in {'openai', 'transformers'}:
            errors.append(f"Unsupported LLM provider: {self.llm.provider}")
        elif self.llm.provider.lower() == 'openai' and not self.llm.api_key:
            errors.append("LLM API key is required for the openai provider")

        if self.review.max_concurrent_oracle_calls < 1:
            errors.append("max_concurrent_oracle_calls must be at least 1")

        if self.dispatch.max_workers < 1 or self.dispatch.max_pending < self.dispatch.max_workers:
            errors.append("Dispatch pool needs max_workers >= 1 and max_pending >= max_workers")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        data = asdict(self)
        # 보안상 토큰은 제외
        data['llm'].pop('api_key', None)
        data['vcs']['github'].pop('token', None)
        data['vcs']['gitea'].pop('token', None)
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

    def _setup_logging(self) -> None:
        """로깅 설정"""
        logging.basicConfig(
            level=getattr(logging, self._config.logging.level.upper()),
            format=self._config.logging.format,
        )

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            handler = RotatingFileHandler(
                self._config.logging.file_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))

            # 루트 로거에 핸들러 추가
            root_logger = logging.getLogger()
            root_logger.addHandler(handler)


# 전역 설정 관리자 (최초 사용 시 생성)
_config_manager: Optional[ConfigManager] = None

def get_config() -> AppConfig:
    """현재 설정 반환"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config
