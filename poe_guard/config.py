import argparse
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from . import __version__
from .exceptions import ConfigurationError
from .logging_config import parse_log_level
from .thresholds import ThresholdRange
from .unifi_client import AlarmFilter

logger = logging.getLogger(__name__)


def _parse_bool(name: str, raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    v = str(raw).strip().lower()
    if v in {"1", "true", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "no", "n", "off"}:
        return False
    raise ConfigurationError(f"Invalid boolean value for {name}={raw!r} (expected true/false).")


def _parse_int(name: str, raw: object) -> int:
    try:
        return int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _read_secret_file(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    p = Path(path)
    if not p.is_file():
        logger.warning("Secret file %s does not exist", p)
        return None
    return p.read_text(encoding="utf-8").strip()


@dataclass
class Settings:
    host: str
    username: str
    password: str
    protected_profile: str
    port: int = 8443
    site: str = "default"
    verify_ssl: bool = True
    unifi_os: bool = False
    timeout: int = 30
    restrictive_profile: Optional[str] = None
    block_port_name: Optional[str] = None
    restore_port_name: Optional[str] = None
    alarm_filter: AlarmFilter = field(default_factory=AlarmFilter)
    warning: Optional[ThresholdRange] = None
    critical: Optional[ThresholdRange] = None
    output_path: Optional[Path] = None
    log_level: str = "WARNING"
    log_dir: Optional[Path] = None

    def validate(self) -> None:
        """Reject settings that can never lead to a meaningful run."""
        for name in ("host", "username", "password"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} is required")
        if self.alarm_filter.limit <= 0:
            raise ConfigurationError("alarm limit must be > 0")
        if self.alarm_filter.start < 0:
            raise ConfigurationError("alarm start must be >= 0")
        if self.alarm_filter.within_hours <= 0:
            raise ConfigurationError("alarm window (within hours) must be > 0")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poe-guard",
        description="Check for PoE disconnect alarms and optionally block affected ports.",
    )
    parser.add_argument("--config", help="YAML config file (default: $APP_CONFIG_FILE)")
    parser.add_argument("--host", help="controller hostname")
    parser.add_argument("--port", type=int, help="controller port (default 8443)")
    parser.add_argument("--site", help="site ID or name (default 'default')")
    parser.add_argument("--user", help="controller username")
    parser.add_argument("--pass", dest="password", help="controller password")
    parser.add_argument("--pass-file", dest="password_file", help="file containing the controller password")
    parser.add_argument("--unifi-os", action="store_true", default=None, help="controller runs on UniFi OS")
    parser.add_argument("--insecure", action="store_true", default=None, help="do not verify the TLS certificate")
    parser.add_argument("--warning", help="execution time warning range in seconds (default 7)")
    parser.add_argument("--critical", help="execution time critical range in seconds (default 10)")
    parser.add_argument(
        "--profileCurr",
        "--protected-profile",
        dest="protected_profile",
        help="only ports carrying this port profile are watched",
    )
    parser.add_argument(
        "--profileBlock",
        "--restrictive-profile",
        dest="restrictive_profile",
        help="move affected ports to this port profile; omit to only observe",
    )
    parser.add_argument("--portNameBlock", dest="block_port_name", help="port name to set when blocking")
    parser.add_argument("--portNameCurr", dest="restore_port_name", help="port name to set when restoring")
    parser.add_argument("--limit", type=int, help="maximum number of alarms to fetch (default 3000)")
    parser.add_argument("--start", type=int, help="alarm offset (default 0)")
    parser.add_argument("--within", type=int, help="alarm window in hours (default 24)")
    parser.add_argument("--path", dest="output_path", help="also write the check result to this file")
    parser.add_argument("--log-level", help="log level (default WARNING)")
    parser.add_argument("--log-dir", help="write a timestamped log file to this directory")
    parser.add_argument("-V", dest="show_version", action="store_true", help="print version and exit")
    return parser


def _load_yaml(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.is_file():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to read YAML config: {path}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("YAML config root must be a mapping/object")

    out: Dict[str, Any] = {}
    for section in ("controller", "profiles", "alarms", "thresholds", "runtime"):
        values = raw.get(section) or {}
        if not isinstance(values, dict):
            raise ConfigurationError(f"{section} must be a mapping/object")
        out.update(values)
    return out


def _from_env() -> Dict[str, Any]:
    env_map = {
        "UNIFI_HOST": "host",
        "UNIFI_PORT": "port",
        "UNIFI_SITE": "site",
        "UNIFI_USER": "user",
        "UNIFI_PASSWORD": "password",
        "UNIFI_PASSWORD_FILE": "password_file",
        "UNIFI_VERIFY_SSL": "verify_ssl",
        "UNIFI_OS": "unifi_os",
        "UNIFI_TIMEOUT": "timeout",
        "LOG_LEVEL": "log_level",
    }
    return {key: os.environ[var] for var, key in env_map.items() if os.getenv(var) not in (None, "")}


def _from_args(args: argparse.Namespace) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    mapping = {
        "host": "host",
        "port": "port",
        "site": "site",
        "user": "user",
        "password": "password",
        "password_file": "password_file",
        "unifi_os": "unifi_os",
        "warning": "warning",
        "critical": "critical",
        "protected_profile": "protected_profile",
        "restrictive_profile": "restrictive_profile",
        "block_port_name": "block_port_name",
        "restore_port_name": "restore_port_name",
        "limit": "limit",
        "start": "start",
        "within": "within_hours",
        "output_path": "output_path",
        "log_level": "log_level",
        "log_dir": "log_dir",
    }
    for attr, key in mapping.items():
        value = getattr(args, attr, None)
        if value is not None:
            out[key] = value
    if getattr(args, "insecure", None):
        out["verify_ssl"] = False
    return out


def _parse_log_level(raw: object) -> str:
    try:
        return parse_log_level(str(raw))
    except ValueError as exc:
        raise ConfigurationError(str(exc), {"log_level": raw}) from exc


def _optional_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


def _build_settings(values: Dict[str, Any]) -> Settings:
    password = values.get("password")
    if not password:
        password = _read_secret_file(values.get("password_file"))

    warning_raw = values.get("warning", "7")
    critical_raw = values.get("critical", "10")

    output_path = values.get("output_path")
    log_dir = values.get("log_dir")

    settings = Settings(
        host=str(values.get("host") or "").strip(),
        username=str(values.get("user") or values.get("username") or "").strip(),
        password=str(password or ""),
        protected_profile=_optional_str(values.get("protected_profile", "all")) or "",
        port=_parse_int("port", values.get("port", 8443)),
        site=str(values.get("site") or "default"),
        verify_ssl=_parse_bool("verify_ssl", values.get("verify_ssl", True)),
        unifi_os=_parse_bool("unifi_os", values.get("unifi_os", False)),
        timeout=_parse_int("timeout", values.get("timeout", 30)),
        restrictive_profile=_optional_str(values.get("restrictive_profile")),
        block_port_name=_optional_str(values.get("block_port_name")),
        restore_port_name=_optional_str(values.get("restore_port_name")),
        alarm_filter=AlarmFilter(
            limit=_parse_int("limit", values.get("limit", 3000)),
            start=_parse_int("start", values.get("start", 0)),
            within_hours=_parse_int("within_hours", values.get("within_hours", 24)),
        ),
        warning=ThresholdRange.parse(str(warning_raw)) if str(warning_raw).strip() else None,
        critical=ThresholdRange.parse(str(critical_raw)) if str(critical_raw).strip() else None,
        output_path=Path(str(output_path)) if output_path else None,
        log_level=_parse_log_level(values.get("log_level", "WARNING")),
        log_dir=Path(str(log_dir)) if log_dir else None,
    )
    settings.validate()
    return settings


def load_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """
    Build settings from, in increasing precedence: YAML config file, environment, command line.

    The YAML file is taken from --config or $APP_CONFIG_FILE and may group keys
    under controller/profiles/alarms/thresholds/runtime sections.
    """
    args = build_parser().parse_args(argv)
    return settings_from_args(args)


def settings_from_args(args: argparse.Namespace) -> Settings:
    values: Dict[str, Any] = {}

    config_file = args.config or os.getenv("APP_CONFIG_FILE")
    if config_file:
        values.update(_load_yaml(config_file))

    values.update(_from_env())
    values.update(_from_args(args))
    return _build_settings(values)


def version_string() -> str:
    return f"Version: check={__version__}"


def redact(settings: Settings) -> List[str]:
    """Settings as log-safe 'key=value' strings."""
    out: List[str] = []
    for key, value in vars(settings).items():
        if key == "password":
            value = "***" if value else ""
        out.append(f"{key}={value}")
    return out
