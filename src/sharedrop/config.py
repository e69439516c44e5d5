"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_ROOT = Path("./uploads")


@dataclass(slots=True)
class AppConfig:
    root: Path = DEFAULT_ROOT
    host: str = "0.0.0.0"
    port: int = 9090
    username: str | None = None
    password: str | None = None
    tls_cert: Path | None = None
    tls_key: Path | None = None
    quiet: bool = False
    disable_hidden_files: bool = False
    read_only: bool = False
    confine_symlinks: bool = True
    rate_limit: int = 20
    rate_window: float = 60.0
    rate_max_keys: int = 10_000
    max_clipboard_bytes: int = 1 << 20

    @property
    def auth_enabled(self) -> bool:
        return bool(self.username) and bool(self.password)

    @property
    def tls_enabled(self) -> bool:
        return self.tls_cert is not None and self.tls_key is not None

    def validate(self) -> None:
        """Reject half-specified credential pairs."""
        if bool(self.username) != bool(self.password):
            raise ValueError("Username and password must be given together.")
        if (self.tls_cert is None) != (self.tls_key is None):
            raise ValueError("TLS needs both a certificate and a private key.")
        if self.rate_limit < 1 or self.rate_window <= 0:
            raise ValueError("Rate limit and window must be positive.")

    def resolve_root(self, base_dir: Path | None = None) -> Path:
        root = Path(self.root).expanduser()
        if not root.is_absolute() and base_dir is not None:
            root = base_dir / root
        return Path(root).absolute()
