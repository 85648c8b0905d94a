import os

from dotenv import find_dotenv, load_dotenv

from statement_analyzer.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"

_CONFIG_FILE_PATH: str | None = None

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_COLOR",
    "LOG_DIR",
    "DATA_DIR",
    "ANNOTATIONS_FILE",
    "ESSENTIALS_FILE",
    "CUSTOM_ESSENTIAL_CATEGORIES",
    "MAX_UPLOAD_BYTES",
    "HOST",
    "PORT",
)

DEFAULT_ANNOTATIONS_FILE = "annotations.json"
DEFAULT_ESSENTIALS_FILE = "essentials.json"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    return find_dotenv(usecwd=True) or None


def _resolve_config_path() -> str:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        return os.path.join(config_dir, CONFIG_FILENAME)
    cwd = os.getcwd()
    candidate = os.path.join(cwd, "config", CONFIG_FILENAME)
    if os.path.exists(candidate):
        return candidate
    return os.path.join(cwd, CONFIG_FILENAME)


def _clean_value(raw_value: str) -> str:
    value = raw_value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    # unquoted values may carry a trailing comment
    return value.split(" #", 1)[0].strip()


def read_config_file(path: str | None) -> dict[str, str]:
    """Read flat ``KEY: value`` lines; nested YAML is not supported."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            key = key.strip()
            value = _clean_value(raw_value)
            if key and value:
                values[key] = value
    return values


def load_environment() -> None:
    global _CONFIG_FILE_PATH

    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    _CONFIG_FILE_PATH = _resolve_config_path()
    file_values = read_config_file(_CONFIG_FILE_PATH)
    for key in _CONFIG_KEYS:
        if key not in os.environ and key in file_values:
            os.environ[key] = file_values[key]


def ensure_dir(path: str | None) -> None:
    if path and path not in {".", "./"}:
        os.makedirs(path, exist_ok=True)


def parse_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    items: list[str] = []
    for part in raw.split(","):
        item = part.strip()
        if item and item not in items:
            items.append(item)
    return items


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_list(name: str) -> list[str]:
    return parse_list(os.getenv(name))


def data_path(filename_key: str, default: str) -> str:
    """Location of a data file; relative names live under ``DATA_DIR``."""
    filename = os.getenv(filename_key) or default
    if os.path.isabs(filename):
        return filename
    return os.path.join(os.getenv("DATA_DIR", "."), filename)


def log_environment() -> None:
    logger.info("[ENV] Configuration file: %s", _CONFIG_FILE_PATH or "<none>")
    for key in _CONFIG_KEYS:
        raw_value = os.getenv(key)
        logger.info("[ENV] %s=%s", key, "<unset>" if raw_value is None else raw_value)


load_environment()

DATA_DIR = os.getenv("DATA_DIR", ".")

ensure_dir(DATA_DIR)

MAX_UPLOAD_BYTES = get_env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES, min_value=1)
