"""Shelf Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    app_name: str = "Shelf"
    host: str = "0.0.0.0"
    port: int = 2342
    debug: bool = False
    log_level: str = "info"

    # Paths
    storage_dir: Path = Path.home() / "shelf" / "storage"
    originals_dir: Path = Path.home() / "shelf" / "originals"
    sidecar_dir: Path = Path.home() / "shelf" / "storage" / "sidecar"
    cache_dir: Path = Path.home() / "shelf" / "storage" / "cache"
    albums_dir: Path = Path.home() / "shelf" / "storage" / "albums"

    # Database
    db_path: Path = Path.home() / "shelf" / "storage" / "index.db"

    # Backups
    disable_backups: bool = False

    # Tokens
    download_token: str = ""
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # Messages
    default_locale: str = "en"

    # Limits
    export_limit: int = 10000
    clone_limit: int = 10000

    model_config = {"env_prefix": "SHELF_"}

    @property
    def backup_yaml(self) -> bool:
        """True if album YAML sidecar files should be written."""
        return not self.disable_backups

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.storage_dir, self.originals_dir, self.sidecar_dir, self.cache_dir, self.albums_dir]:
            d.mkdir(parents=True, exist_ok=True)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate secrets if not set, persist to file so they survive restarts."""
        secrets_file = self.storage_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.jwt_secret:
            self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)
        if not self.download_token:
            self.download_token = saved.get("download_token", "") or secrets.token_hex(4)

        # Persist for next restart
        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\ndownload_token={self.download_token}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()
