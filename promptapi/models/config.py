"""
Configuration models for promptapi.

Defines frozen dataclasses for the YAML application config and the
API descriptor file. Instances are built once at startup and passed
into the components that need them.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ApiConfig:
    """The single REST API that prompts are translated into calls against."""
    base_url: str
    documentation: str


@dataclass(frozen=True)
class CompletionConfig:
    """Configuration for the language-model completion service."""
    base_url: str = ""  # empty means the OpenAI default endpoint
    api_key: str = ""
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    timeout: float = 60.0


@dataclass(frozen=True)
class OrchestrationConfig:
    """Limits for a single orchestration session."""
    max_depth: int = 5
    session_timeout: float = 0.0  # seconds, 0 disables the deadline
    max_payload_chars: int = 8000  # 0 disables truncation


@dataclass(frozen=True)
class ExecutorConfig:
    """Configuration for calls against the target API."""
    timeout: float = 30.0
    user_agent: str = "promptapi/0.1.0"


@dataclass(frozen=True)
class ApiSourceConfig:
    """Where to load the API descriptor from."""
    config_path: str = "apis/fire-and-ice.json"


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the FastAPI server."""
    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 1
    reload: bool = False
    public_dir: str = ""
    cors_origins: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"


@dataclass(frozen=True)
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = ""
    secret_key: str = ""
    host: str = ""
    debug: bool = False

    @property
    def is_configured(self) -> bool:
        """Check if Langfuse is configured (both keys present)."""
        return bool(self.public_key and self.secret_key)


@dataclass(frozen=True)
class AppConfig:
    """
    Unified application configuration container.

    Holds all configuration sections loaded from config/config.yaml.
    """
    version: str = "1.0"
    completion: CompletionConfig = field(default_factory=CompletionConfig)
    orchestration: OrchestrationConfig = field(default_factory=OrchestrationConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    api: ApiSourceConfig = field(default_factory=ApiSourceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)

    @property
    def log_level(self) -> str:
        return self.logging.level
