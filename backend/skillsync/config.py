from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / "SkillSync"
    token_ttl_seconds: int = 86400  # 24 hours
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    # Outbound email is handed to a pluggable transport; disabling skips dispatch entirely.
    notifications_enabled: bool = True
    mail_from: str = "noreply@skillsync.dev"
    client_url: str = "http://localhost:3000"
    default_page_size: int = 10
    max_page_size: int = 100
    # Bootstrap admin account, created at startup when both are set
    admin_email: str | None = None
    admin_password: str | None = None

    @property
    def db_path(self) -> Path:
        return self.data_dir / "skillsync.sqlite"

    model_config = {"env_prefix": "SKILLSYNC_"}


settings = Settings()
