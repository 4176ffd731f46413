"""The `.fed` configuration file stored at the notes root.

Values resolve as file > environment variable > schema default. Only keys
declared in ``SCHEMA`` are read or written; the file is edited surgically so
comments and user formatting survive updates.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

logger = logging.getLogger(__name__)

CONFIG_FILE = ".fed"

ValueType = Literal["string", "integer", "boolean"]


@dataclass(frozen=True)
class ConfigKey:
    """Schema entry for a single `.fed` key."""

    type: ValueType
    default: Any = None
    env: str | None = None


SCHEMA: dict[str, ConfigKey] = {
    # UI settings
    "theme": ConfigKey("string"),
    "locale": ConfigKey("string", "en", "FEDNOTES_LOCALE"),
    "editor_font": ConfigKey("string", "cascadia-code"),
    "editor_font_size": ConfigKey("integer", 14),
    "editor_width": ConfigKey("integer", 72),
    "preview_zoom": ConfigKey("integer", 100),
    "sidebar_visible": ConfigKey("boolean", True),
    "typewriter_mode": ConfigKey("boolean", False),
    "editor_indent": ConfigKey("integer", 2),
    "editor_line_numbers": ConfigKey("integer", 0),
    # Paths
    "images_path": ConfigKey("string", None, "IMAGES_PATH"),
    # AWS S3
    "aws_access_key_id": ConfigKey("string", None, "AWS_ACCESS_KEY_ID"),
    "aws_secret_access_key": ConfigKey("string", None, "AWS_SECRET_ACCESS_KEY"),
    "aws_s3_bucket": ConfigKey("string", None, "AWS_S3_BUCKET"),
    "aws_region": ConfigKey("string", "us-east-1", "AWS_REGION"),
    # YouTube
    "youtube_api_key": ConfigKey("string", None, "YOUTUBE_API_KEY"),
    # Google Custom Search
    "google_api_key": ConfigKey("string", None, "GOOGLE_API_KEY"),
    "google_cse_id": ConfigKey("string", None, "GOOGLE_CSE_ID"),
    # AI / LLM
    "ai_provider": ConfigKey("string", "auto", "AI_PROVIDER"),
    "ai_model": ConfigKey("string", None, "AI_MODEL"),
    "ollama_api_base": ConfigKey("string", None, "OLLAMA_API_BASE"),
    "ollama_model": ConfigKey("string", "llama3.2:latest", "OLLAMA_MODEL"),
    "openrouter_api_key": ConfigKey("string", None, "OPENROUTER_API_KEY"),
    "openrouter_model": ConfigKey("string", "openai/gpt-4o-mini", "OPENROUTER_MODEL"),
    "anthropic_api_key": ConfigKey("string", None, "ANTHROPIC_API_KEY"),
    "anthropic_model": ConfigKey(
        "string", "claude-sonnet-4-20250514", "ANTHROPIC_MODEL"
    ),
    "gemini_api_key": ConfigKey("string", None, "GEMINI_API_KEY"),
    "gemini_model": ConfigKey("string", "gemini-2.0-flash", "GEMINI_MODEL"),
    "openai_api_key": ConfigKey("string", None, "OPENAI_API_KEY"),
    "openai_model": ConfigKey("string", "gpt-4o-mini", "OPENAI_MODEL"),
    "image_generation_model": ConfigKey(
        "string", "imagen-4.0-generate-001", "IMAGE_GENERATION_MODEL"
    ),
}

# Never sent to the browser in clear text
SENSITIVE_KEYS = frozenset(
    {
        "aws_access_key_id",
        "aws_secret_access_key",
        "youtube_api_key",
        "google_api_key",
        "openai_api_key",
        "openrouter_api_key",
        "anthropic_api_key",
        "gemini_api_key",
    }
)

# Settings the editor front end is allowed to read and save
UI_KEYS = (
    "theme",
    "locale",
    "editor_font",
    "editor_font_size",
    "editor_width",
    "preview_zoom",
    "sidebar_visible",
    "typewriter_mode",
    "editor_indent",
    "editor_line_numbers",
)

# Order used when ai_provider = auto
AI_PROVIDER_PRIORITY = ("openai", "anthropic", "openrouter", "ollama", "gemini")

# If any of these is present in the file, AI env vars are ignored entirely
AI_CREDENTIAL_KEYS = (
    "ollama_api_base",
    "openrouter_api_key",
    "anthropic_api_key",
    "gemini_api_key",
    "openai_api_key",
)

_AI_SECTION_KEYS = (
    "ai_provider",
    "ai_model",
    "ollama_api_base",
    "ollama_model",
    "openrouter_api_key",
    "openrouter_model",
    "anthropic_api_key",
    "anthropic_model",
    "gemini_api_key",
    "gemini_model",
    "openai_api_key",
    "openai_model",
)

_KEY_LINE = re.compile(r"^([a-z0-9_]+)\s*=\s*(.*)$", re.IGNORECASE)
_COMMENTED_KEY_LINE = re.compile(r"^#\s*([a-z0-9_]+)\s*=", re.IGNORECASE)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

TEMPLATE_SECTIONS: list[tuple[str, list[str]]] = [
    (
        "# fednotes configuration",
        [
            "# fednotes configuration",
            "# Uncomment and modify values as needed.",
            "# Environment variables are used as defaults if not specified here.",
        ],
    ),
    (
        "# UI Settings",
        [
            "",
            "# UI Settings",
            "",
            "# theme = dark",
            "# editor_font = cascadia-code",
            "# editor_font_size = 14",
            "# preview_zoom = 100",
            "# sidebar_visible = true",
            "# typewriter_mode = false",
            "",
            "# Editor indent: 0 = tab, 1-6 = spaces (default: 2)",
            "# editor_indent = 2",
        ],
    ),
    (
        "# Local Images",
        [
            "",
            "# Local Images",
            "",
            "# images_path = /path/to/images",
        ],
    ),
    (
        "# AWS S3",
        [
            "",
            "# AWS S3 (for image uploads)",
            "",
            "# aws_access_key_id = your-access-key",
            "# aws_secret_access_key = your-secret-key",
            "# aws_s3_bucket = your-bucket-name",
            "# aws_region = us-east-1",
        ],
    ),
    (
        "# YouTube API",
        [
            "",
            "# YouTube API (for video search)",
            "",
            "# youtube_api_key = your-youtube-api-key",
        ],
    ),
    (
        "# Google Custom Search",
        [
            "",
            "# Google Custom Search (for image search)",
            "",
            "# google_api_key = your-google-api-key",
            "# google_cse_id = your-custom-search-engine-id",
        ],
    ),
    (
        "# AI/LLM",
        [
            "",
            "# AI/LLM (for grammar checking)",
            "# Provider priority when ai_provider = auto:",
            "#   openai > anthropic > openrouter > ollama > gemini",
            "",
            "# ai_provider = auto",
            "# ai_model = (uses provider-specific default if not set)",
            "",
            "# openai_api_key = sk-...",
            "# openai_model = gpt-4o-mini",
            "",
            "# anthropic_api_key = sk-ant-...",
            "# anthropic_model = claude-sonnet-4-20250514",
            "",
            "# gemini_api_key = ...",
            "# gemini_model = gemini-2.0-flash",
            "",
            "# openrouter_api_key = sk-or-...",
            "# openrouter_model = openai/gpt-4o-mini",
            "",
            "# ollama_api_base = http://localhost:11434",
            "# ollama_model = llama3.2:latest",
        ],
    ),
]


def cast_value(value: Any, value_type: ValueType) -> Any:
    """Cast a raw value to the schema type; blank values become None."""
    if value is None or str(value).strip() == "":
        return None

    if value_type == "integer":
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        match = _LEADING_INT.match(str(value))
        return int(match.group(1)) if match else 0
    if value_type == "boolean":
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "1", "yes", "on")
    return str(value)


def mask_secret(value: str | None) -> str | None:
    """Mask a secret, keeping only the last four characters visible."""
    if not value:
        return value
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


def format_line(key: str, value: Any) -> str:
    """Render ``key = value`` for the file."""
    value_type = SCHEMA[key].type
    if value_type == "boolean":
        return f"{key} = {'true' if value else 'false'}"
    if value is None:
        return f"{key} ="
    text = str(value)
    if value_type == "string" and (" " in text or "=" in text):
        return f'{key} = "{text}"'
    return f"{key} = {text}"


def parse_config(content: str) -> dict[str, Any]:
    """Parse `.fed` content into casted values for known keys."""
    values: dict[str, Any] = {}
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        match = _KEY_LINE.match(line)
        if not match:
            continue

        key = match.group(1).lower()
        value = match.group(2).strip()
        for quote in ('"', "'"):
            if len(value) >= 2 and value.startswith(quote) and value.endswith(quote):
                value = value[1:-1]

        if key in SCHEMA:
            values[key] = cast_value(value, SCHEMA[key].type)
    return values


class FedConfig:
    """Configuration backed by the `.fed` file of a notes root."""

    def __init__(self, base_path: Path | str):
        self.base_path = Path(base_path)
        self.values: dict[str, Any] = {}
        logger.debug("Loading .fed config from %s", self.base_path)
        self._load()

    @property
    def config_file_path(self) -> Path:
        return self.base_path / CONFIG_FILE

    def get(self, key: str) -> Any:
        """Resolve a value: file, then environment, then default."""
        spec = SCHEMA.get(key)
        if spec is None:
            return None
        if key in self.values:
            return self.values[key]
        if spec.env and os.getenv(spec.env, "").strip():
            return cast_value(os.environ[spec.env], spec.type)
        return spec.default

    def source(self, key: str) -> str:
        """Where the effective value of ``key`` comes from."""
        spec = SCHEMA[key]
        if key in self.values:
            return "file"
        if spec.env and os.getenv(spec.env, "").strip():
            return "env"
        return "default"

    def set(self, key: str, value: Any) -> bool:
        """Set a single value and persist it."""
        if key not in SCHEMA:
            return False
        return self.update({key: value})

    def update(self, new_values: dict[str, Any]) -> bool:
        """Set several values at once; unknown keys are ignored."""
        changes: dict[str, Any] = {}
        for key, value in new_values.items():
            key = str(key)
            if key not in SCHEMA:
                continue
            casted = cast_value(value, SCHEMA[key].type)
            self.values[key] = casted
            changes[key] = casted
        self._save_keys(changes)
        return True

    def ui_settings(self) -> dict[str, Any]:
        return {key: self.get(key) for key in UI_KEYS}

    def all_settings(self, include_sensitive: bool = False) -> dict[str, Any]:
        """All resolved settings; secrets become ``<key>_configured`` flags."""
        result: dict[str, Any] = {}
        for key in SCHEMA:
            if key in SENSITIVE_KEYS and not include_sensitive:
                result[f"{key}_configured"] = bool(self.get(key))
            else:
                result[key] = self.get(key)
        return result

    def entries(self) -> list[dict[str, Any]]:
        """Per-key diagnostics with masked secrets."""
        rows = []
        for key, spec in SCHEMA.items():
            value = self.get(key)
            sensitive = key in SENSITIVE_KEYS
            if sensitive and value is not None:
                value = mask_secret(str(value))
            rows.append(
                {
                    "key": key,
                    "value": value,
                    "source": self.source(key),
                    "env_var": spec.env,
                    "sensitive": sensitive,
                }
            )
        return rows

    def feature_available(self, feature: str) -> bool:
        if feature == "s3_upload":
            return bool(
                self.get("aws_access_key_id")
                and self.get("aws_secret_access_key")
                and self.get("aws_s3_bucket")
            )
        if feature == "youtube_search":
            return bool(self.get("youtube_api_key"))
        if feature == "google_search":
            return bool(self.get("google_api_key") and self.get("google_cse_id"))
        if feature == "local_images":
            return bool(self.get("images_path"))
        if feature == "ai":
            return bool(self.ai_providers_available())
        return False

    def features(self) -> dict[str, bool]:
        return {
            name: self.feature_available(name)
            for name in ("s3_upload", "youtube_search", "google_search", "local_images")
        }

    # --- AI provider resolution ---

    def ai_configured_in_file(self) -> bool:
        return any(key in self.values for key in AI_CREDENTIAL_KEYS)

    def get_ai(self, key: str) -> Any:
        """Like ``get``, but ignores env vars once the file holds AI credentials."""
        if key not in SCHEMA:
            return None
        if self.ai_configured_in_file():
            return self.values.get(key, SCHEMA[key].default)
        return self.get(key)

    def ai_providers_available(self) -> list[str]:
        available = []
        if self.get_ai("ollama_api_base"):
            available.append("ollama")
        if self.get_ai("openrouter_api_key"):
            available.append("openrouter")
        if self.get_ai("anthropic_api_key"):
            available.append("anthropic")
        if self.get_ai("gemini_api_key"):
            available.append("gemini")
        if self.get_ai("openai_api_key"):
            available.append("openai")
        return available

    def effective_ai_provider(self) -> str | None:
        available = self.ai_providers_available()
        if not available:
            return None

        configured = self.get_ai("ai_provider")
        if configured and configured != "auto" and configured in available:
            return configured

        return next(p for p in AI_PROVIDER_PRIORITY if p in available)

    def effective_ai_model(self) -> str | None:
        provider = self.effective_ai_provider()
        if provider is None:
            return None
        return self.get_ai("ai_model") or self.get_ai(f"{provider}_model")

    # --- File handling ---

    def ensure_config_file(self) -> None:
        """Create the template, or upgrade an existing file with new sections."""
        if self.config_file_path.exists():
            self._upgrade_config_file()
        else:
            logger.warning(
                ".fed not found at %s, creating template", self.config_file_path
            )
            self._create_template_config()

    def _load(self) -> None:
        self.ensure_config_file()
        if not self.config_file_path.exists():
            return
        try:
            self.values = parse_config(
                self.config_file_path.read_text(encoding="utf-8")
            )
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to load .fed config: %s", e)
            self.values = {}

    def _create_template_config(self) -> None:
        lines = [line for _, section in TEMPLATE_SECTIONS for line in section]
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            self.config_file_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as e:
            logger.error(
                "Cannot create .fed at %s: %s", self.config_file_path, e
            )

    def _upgrade_config_file(self) -> None:
        """Append the AI section to files that predate it.

        Sections the user deleted on purpose are not re-added; only the AI
        block is considered new.
        """
        try:
            existing = self.config_file_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.warning("Failed to read .fed for upgrade: %s", e)
            return

        pattern = re.compile(
            r"^#?\s*(" + "|".join(_AI_SECTION_KEYS) + r")\s*=", re.IGNORECASE
        )
        if any("# AI/LLM" in line or pattern.match(line) for line in existing):
            return

        ai_lines = dict(TEMPLATE_SECTIONS)["# AI/LLM"]
        new_lines = list(existing)
        if new_lines and not new_lines[-1].strip():
            # Section template already starts with a blank separator
            new_lines.pop()
        new_lines.extend(ai_lines)
        try:
            self.config_file_path.write_text(
                "\n".join(new_lines) + "\n", encoding="utf-8"
            )
            logger.info("Upgraded .fed config with AI/LLM section")
        except OSError as e:
            logger.warning("Failed to upgrade .fed config: %s", e)

    def _save_keys(self, changes: dict[str, Any]) -> None:
        """Rewrite only the given keys, preserving everything else verbatim."""
        if not changes:
            return

        self.ensure_config_file()
        try:
            content = self.config_file_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Failed to read .fed config: %s", e)
            return

        lines: list[str] = []
        written: set[str] = set()

        for raw in content.splitlines():
            stripped = raw.strip()
            if not stripped:
                lines.append("")
                continue

            if stripped.startswith("#"):
                match = _COMMENTED_KEY_LINE.match(stripped)
                if match:
                    key = match.group(1).lower()
                    if key in changes and key not in written:
                        lines.append(format_line(key, changes[key]))
                        written.add(key)
                        continue
                lines.append(raw)
                continue

            match = _KEY_LINE.match(stripped)
            if match and match.group(1).lower() in changes:
                key = match.group(1).lower()
                if key not in written:
                    lines.append(format_line(key, changes[key]))
                    written.add(key)
                continue
            lines.append(raw)

        for key, value in changes.items():
            if key not in written:
                lines.append(format_line(key, value))

        try:
            self.config_file_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as e:
            logger.error("Failed to save .fed config: %s", e)
