# fusionsolar_exporter/config.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping
import configparser
import os

from fusionsolar_exporter.models.session import Credentials


DEFAULT_API_URL = "https://eu5.fusionsolar.huawei.com/thirdData"
ENV_PREFIX = "FS_"


@dataclass
class FusionSolarConfig:
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    api_url: str = DEFAULT_API_URL
    timeout: float | None = None

    def credentials(self) -> Credentials:
        return Credentials(
            base_url=self.api_url.rstrip("/"),
            username=self.username or "",
            secret=self.password or "",
        )


@dataclass
class ExporterConfig:
    interval: int = 300   # seconds between collections; cached metrics served in between
    bind: str = "0.0.0.0"
    port: int = 8000


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    fusionsolar: FusionSolarConfig
    exporter: ExporterConfig
    logging: LoggingConfig


class Config:
    def __init__(self, path: str | None = None):
        self.path = Path(path) if path else None
        self.parser = configparser.ConfigParser(inline_comment_prefixes=("#",))
        if self.path is not None:
            read = self.parser.read(self.path)
            if not read:
                raise FileNotFoundError(f"Config file not found: {self.path}")

    @classmethod
    def load(cls, path: str | None = None, environ: Mapping[str, str] | None = None) -> AppConfig:
        """
        Build the app config from an optional INI file, then FS_* environment
        variables (environment wins).
        """
        cfg = cls(path)
        env = os.environ if environ is None else environ

        p = cfg.parser

        def _as_bool(value: str) -> bool:
            return value.strip().lower() in ("true", "1", "yes")

        def _maybe_float(raw: str | None) -> float | None:
            if raw is None:
                return None
            raw = raw.strip()
            if not raw:
                return None
            return float(raw)

        def _env(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        # --- FusionSolar API ---
        fs_kwargs = {}
        if "fusionsolar" in p:
            fs_sec = p["fusionsolar"]
            if "api_url" in fs_sec:
                fs_kwargs["api_url"] = fs_sec["api_url"]
            if "username" in fs_sec:
                fs_kwargs["username"] = fs_sec["username"]
            if "password" in fs_sec:
                fs_kwargs["password"] = fs_sec["password"]
            if (timeout := _maybe_float(fs_sec.get("timeout"))) is not None:
                fs_kwargs["timeout"] = timeout

        if (api_url := _env("API_URL")) is not None:
            fs_kwargs["api_url"] = api_url
        if (username := _env("USERNAME")) is not None:
            fs_kwargs["username"] = username
        if (password := _env("PASSWORD")) is not None:
            fs_kwargs["password"] = password
        if (timeout := _maybe_float(_env("TIMEOUT"))) is not None:
            fs_kwargs["timeout"] = timeout

        fusionsolar = FusionSolarConfig(**fs_kwargs)
        if not fusionsolar.username or not fusionsolar.password:
            raise ValueError(
                "FusionSolar credentials missing: set FS_USERNAME and FS_PASSWORD "
                "or [fusionsolar] username/password"
            )

        # --- Exporter ---
        exporter_kwargs = {}
        if "exporter" in p:
            exp_sec = p["exporter"]
            if "interval" in exp_sec:
                exporter_kwargs["interval"] = int(exp_sec["interval"])
            if "bind" in exp_sec:
                exporter_kwargs["bind"] = exp_sec["bind"]
            if "port" in exp_sec:
                exporter_kwargs["port"] = int(exp_sec["port"])

        if (interval := _env("INTERVAL")) is not None:
            exporter_kwargs["interval"] = int(interval)
        if (bind := _env("BIND")) is not None:
            exporter_kwargs["bind"] = bind
        if (port := _env("PORT")) is not None:
            exporter_kwargs["port"] = int(port)

        exporter_cfg = ExporterConfig(**exporter_kwargs)
        if exporter_cfg.interval < 0:
            raise ValueError(f"interval must be >= 0 (got {exporter_cfg.interval})")

        # --- Logging ---
        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = logging_sec["structured_path"]

        if (level := _env("LOG_LEVEL")) is not None:
            logging_kwargs["console_level"] = level
        logging_cfg = LoggingConfig(**logging_kwargs)

        return AppConfig(
            fusionsolar=fusionsolar,
            exporter=exporter_cfg,
            logging=logging_cfg,
        )
