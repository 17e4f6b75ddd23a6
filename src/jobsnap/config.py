import math
import os

from dotenv import load_dotenv

from jobsnap.identifiers import DEFAULT_FILENAME_TEMPLATE

# Load environment variables from .env file
load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def get_config() -> dict[str, str]:
    """
    Read raw configuration values from environment variables.
    Called lazily so that importing this module never fails.
    """
    return {
        "OUTPUT_DIR": os.getenv("JOBSNAP_OUTPUT_DIR", "jobs"),
        "FILENAME_TEMPLATE": os.getenv("JOBSNAP_FILENAME_TEMPLATE", DEFAULT_FILENAME_TEMPLATE),
        "SKIP_EXISTING": os.getenv("JOBSNAP_SKIP_EXISTING", "false"),
        "HTTP_TIMEOUT": os.getenv("JOBSNAP_HTTP_TIMEOUT", "15"),
    }


class _Config:
    """Lazy configuration that only validates when values are actually accessed."""

    def __init__(self) -> None:
        self._config: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._config is None:
            self._config = get_config()
        return self._config

    @property
    def OUTPUT_DIR(self) -> str:
        return self._load()["OUTPUT_DIR"].strip() or "jobs"

    @property
    def FILENAME_TEMPLATE(self) -> str:
        return self._load()["FILENAME_TEMPLATE"].strip() or DEFAULT_FILENAME_TEMPLATE

    @property
    def SKIP_EXISTING(self) -> bool:
        """Whether `save` leaves already-catalogued jobs untouched."""
        raw = self._load()["SKIP_EXISTING"].strip().lower()
        if raw in _TRUE_VALUES:
            return True
        if raw in _FALSE_VALUES:
            return False
        raise ValueError(f"JOBSNAP_SKIP_EXISTING must be a boolean, got '{raw}'")

    @property
    def HTTP_TIMEOUT(self) -> float:
        """HTTP timeout in seconds. Must be a finite positive number."""
        raw = self._load()["HTTP_TIMEOUT"]
        try:
            timeout = float(raw)
        except ValueError:
            raise ValueError(f"JOBSNAP_HTTP_TIMEOUT must be a positive number, got '{raw}'") from None
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError(f"JOBSNAP_HTTP_TIMEOUT must be a positive number, got {timeout}")
        return timeout


_cfg = _Config()

# Module-level type declarations for mypy.
# The values come from __getattr__ below, on first access.
OUTPUT_DIR: str
FILENAME_TEMPLATE: str
SKIP_EXISTING: bool
HTTP_TIMEOUT: float


def __getattr__(name: str) -> str | bool | float:
    if name == "OUTPUT_DIR":
        return _cfg.OUTPUT_DIR
    if name == "FILENAME_TEMPLATE":
        return _cfg.FILENAME_TEMPLATE
    if name == "SKIP_EXISTING":
        return _cfg.SKIP_EXISTING
    if name == "HTTP_TIMEOUT":
        return _cfg.HTTP_TIMEOUT
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
