"""Configuration management for trackpick.

Supports loading configuration from:
1. Environment variables (TRACKPICK_*)
2. Config file (~/.trackpick/config.yaml or an explicit path)
3. Default values

Example config file (~/.trackpick/config.yaml):
    selection:
      video:
        - resolution: max
        - duration: max
      audio:
        - language: [eng]
        - codec: [truehd, dts, ac3]
      subtitle:
        # each entry is an independent rule-set picking one subtitle role
        - - language: [eng]
          - foreign: true
        - - language: [eng]
          - codec: [subrip, hdmv_pgs_subtitle]
    image_codecs: [hdmv_pgs_subtitle, dvd_subtitle]
    tools:
      timeout_seconds: 600
      max_output_bytes: 409600
    output:
      path: /media/converted
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from trackpick.exceptions import InvalidRuleConfiguration
from trackpick.models import (
    CodecRule,
    DurationRule,
    ForeignAudioRule,
    LanguageRule,
    ResolutionRule,
    SelectionRule,
    StreamKind,
)

logger = logging.getLogger(__name__)

# Config file search locations (in priority order)
CONFIG_LOCATIONS = [
    Path.home() / ".trackpick" / "config.yaml",
    Path.home() / ".config" / "trackpick" / "config.yaml",
    Path(".trackpick.yaml"),
]

DEFAULT_IMAGE_CODECS = ["hdmv_pgs_subtitle", "dvd_subtitle", "dvb_subtitle", "xsub"]

_rule_adapter: TypeAdapter[SelectionRule] = TypeAdapter(SelectionRule)


def _default_video_rules() -> list[SelectionRule]:
    return [ResolutionRule(mode="max"), DurationRule(mode="max")]


def _default_audio_rules() -> list[SelectionRule]:
    return [LanguageRule(languages=["eng"])]


def _default_subtitle_rule_sets() -> list[list[SelectionRule]]:
    return [
        [LanguageRule(languages=["eng"]), ForeignAudioRule()],
        [LanguageRule(languages=["eng"]), CodecRule(codecs=["subrip", "hdmv_pgs_subtitle"])],
    ]


@dataclass
class SelectionConfig:
    """Rule chains per stream kind."""

    video: list[SelectionRule] = field(default_factory=_default_video_rules)
    audio: list[SelectionRule] = field(default_factory=_default_audio_rules)
    subtitle: list[list[SelectionRule]] = field(default_factory=_default_subtitle_rule_sets)


@dataclass
class ForeignAudioConfig:
    """Foreign-audio subtitle heuristic settings."""

    batch_size: int = 4
    ratio: float = 0.25


@dataclass
class ToolsConfig:
    """External tool invocation settings."""

    ffprobe: str = "ffprobe"
    ffmpeg: str = "ffmpeg"
    timeout_seconds: int = 600
    max_output_bytes: int = 400 * 1024
    retry_attempts: int = 1
    retry_delay_seconds: float = 2.0


@dataclass
class OCRConfig:
    """OCR transcript settings."""

    text_prefix: str = "lavfi.ocr.text="
    language: str = "eng"


@dataclass
class OutputConfig:
    """Caption and encoder output settings."""

    path: str = "."
    caption_dir: str | None = None
    global_options: list[str] = field(default_factory=lambda: ["-hide_banner", "-nostdin", "-y"])
    video_encoder: str = "copy"
    video_options: list[str] = field(default_factory=list)
    audio_encoder: str = "copy"
    audio_options: list[str] = field(default_factory=list)
    subtitle_encoder: str = "copy"
    subtitle_options: list[str] = field(default_factory=list)


@dataclass
class TrackpickConfig:
    """Main configuration for trackpick."""

    selection: SelectionConfig = field(default_factory=SelectionConfig)
    image_codecs: list[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_CODECS))
    foreign_audio: ForeignAudioConfig = field(default_factory=ForeignAudioConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def is_image_codec(self, codec_name: str | None) -> bool:
        """Check if a subtitle codec is bitmap based and needs OCR."""
        return codec_name is not None and codec_name in self.image_codecs


def parse_rule(raw: Any, kind: StreamKind) -> SelectionRule:
    """Parse one rule from its config shorthand.

    Accepts the single-key shorthand (``{"resolution": "max"}``,
    ``{"language": ["eng"]}``, ``{"foreign": true}``) as well as the
    explicit tagged form (``{"rule": "duration", "mode": "min"}``).

    Raises:
        InvalidRuleConfiguration: For unknown rule kinds or unsupported values
    """
    if not isinstance(raw, Mapping):
        raise InvalidRuleConfiguration("rule must be a mapping", raw)

    if "rule" in raw:
        try:
            rule = _rule_adapter.validate_python(dict(raw))
        except ValidationError as e:
            raise InvalidRuleConfiguration(f"invalid rule ({e.error_count()} errors)", dict(raw)) from e
    else:
        if len(raw) != 1:
            raise InvalidRuleConfiguration("rule shorthand must have exactly one key", dict(raw))
        key, value = next(iter(raw.items()))
        rule = _parse_shorthand(key, value)

    if isinstance(rule, ForeignAudioRule) and kind is not StreamKind.SUBTITLE:
        raise InvalidRuleConfiguration(f"foreign audio rule not allowed in {kind.value} chain", dict(raw))
    return rule


def _parse_shorthand(key: str, value: Any) -> SelectionRule:
    if key == "resolution":
        if value in ("min", "max"):
            return ResolutionRule(mode=value)
        try:
            return ResolutionRule(mode="exact", width=int(value))
        except (ValueError, TypeError):
            raise InvalidRuleConfiguration("invalid resolution specifier", value) from None
    if key == "duration":
        if value not in ("min", "max"):
            raise InvalidRuleConfiguration("invalid duration specifier", value)
        return DurationRule(mode=value)
    if key == "language":
        return LanguageRule(languages=_as_str_list(key, value))
    if key == "codec":
        return CodecRule(codecs=_as_str_list(key, value))
    if key == "foreign":
        if not value:
            raise InvalidRuleConfiguration("foreign rule must be enabled with a true value", value)
        return ForeignAudioRule()
    raise InvalidRuleConfiguration("unknown rule kind", key)


def _as_str_list(key: str, value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise InvalidRuleConfiguration(f"{key} rule needs a list of strings", value)


def parse_chain(raw: Any, kind: StreamKind) -> list[SelectionRule]:
    """Parse a rule chain for ``kind``."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidRuleConfiguration(f"{kind.value} rules must be a list", raw)
    return [parse_rule(item, kind) for item in raw]


def parse_selection(raw: Mapping[str, Any]) -> SelectionConfig:
    """Parse the ``selection`` section, keeping defaults for absent kinds."""
    selection = SelectionConfig()
    if "video" in raw:
        selection.video = parse_chain(raw["video"], StreamKind.VIDEO)
    if "audio" in raw:
        selection.audio = parse_chain(raw["audio"], StreamKind.AUDIO)
    if "subtitle" in raw:
        rule_sets = raw["subtitle"] or []
        if not isinstance(rule_sets, list):
            raise InvalidRuleConfiguration("subtitle rule-sets must be a list", rule_sets)
        # A flat chain is accepted as a single rule-set
        if rule_sets and all(isinstance(r, Mapping) for r in rule_sets):
            rule_sets = [rule_sets]
        selection.subtitle = [parse_chain(rs, StreamKind.SUBTITLE) for rs in rule_sets]
    return selection


def _load_yaml_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file if available."""
    if path is not None:
        candidates = [Path(path)]
        if not candidates[0].exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        candidates = [p for p in CONFIG_LOCATIONS if p.exists()]

    for config_path in candidates:
        with open(config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidRuleConfiguration(f"cannot parse {config_path}", str(e)) from e
        logger.debug("Loaded config from %s", config_path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise InvalidRuleConfiguration(f"{config_path} must contain a mapping", type(data).__name__)
        return data
    return {}


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with TRACKPICK_ prefix."""
    return os.environ.get(f"TRACKPICK_{key}", default)


def load_config(path: str | Path | None = None) -> TrackpickConfig:
    """Load configuration from file and environment variables.

    Priority (highest first):
    1. Environment variables (TRACKPICK_*)
    2. Config file (``path``, or the first of CONFIG_LOCATIONS found)
    3. Default values

    Raises:
        InvalidRuleConfiguration: If a rule chain in the file is invalid
        FileNotFoundError: If an explicit ``path`` does not exist
    """
    return config_from_dict(_load_yaml_config(path))


def config_from_dict(file_config: Mapping[str, Any]) -> TrackpickConfig:
    """Build a TrackpickConfig from a parsed config mapping plus environment."""
    selection = parse_selection(file_config.get("selection") or {})

    image_codecs = file_config.get("image_codecs", DEFAULT_IMAGE_CODECS)
    if not isinstance(image_codecs, list):
        raise InvalidRuleConfiguration("image_codecs must be a list", image_codecs)

    # Foreign audio heuristic
    fa_config = file_config.get("foreign_audio") or {}
    foreign_audio = ForeignAudioConfig(
        batch_size=int(_get_env("BATCH_SIZE") or fa_config.get("batch_size", 4)),
        ratio=float(fa_config.get("ratio", 0.25)),
    )
    if foreign_audio.batch_size < 1:
        raise InvalidRuleConfiguration("foreign_audio.batch_size must be positive", foreign_audio.batch_size)

    # Tools
    tools_config = file_config.get("tools") or {}
    tools = ToolsConfig(
        ffprobe=_get_env("FFPROBE") or tools_config.get("ffprobe", "ffprobe"),
        ffmpeg=_get_env("FFMPEG") or tools_config.get("ffmpeg", "ffmpeg"),
        timeout_seconds=int(_get_env("TOOL_TIMEOUT") or tools_config.get("timeout_seconds", 600)),
        max_output_bytes=int(
            _get_env("MAX_OUTPUT_BYTES") or tools_config.get("max_output_bytes", 400 * 1024)
        ),
        retry_attempts=int(_get_env("RETRY_ATTEMPTS") or tools_config.get("retry_attempts", 1)),
        retry_delay_seconds=float(tools_config.get("retry_delay_seconds", 2.0)),
    )

    # OCR
    ocr_config = file_config.get("ocr") or {}
    ocr = OCRConfig(
        text_prefix=ocr_config.get("text_prefix", "lavfi.ocr.text="),
        language=ocr_config.get("language", "eng"),
    )

    # Output
    output_config = file_config.get("output") or {}
    defaults = OutputConfig()
    output = OutputConfig(
        path=_get_env("OUTPUT_PATH") or output_config.get("path", defaults.path),
        caption_dir=_get_env("CAPTION_DIR") or output_config.get("caption_dir"),
        global_options=list(output_config.get("global_options", defaults.global_options)),
        video_encoder=output_config.get("video_encoder", defaults.video_encoder),
        video_options=list(output_config.get("video_options", [])),
        audio_encoder=output_config.get("audio_encoder", defaults.audio_encoder),
        audio_options=list(output_config.get("audio_options", [])),
        subtitle_encoder=output_config.get("subtitle_encoder", defaults.subtitle_encoder),
        subtitle_options=list(output_config.get("subtitle_options", [])),
    )

    return TrackpickConfig(
        selection=selection,
        image_codecs=[str(c) for c in image_codecs],
        foreign_audio=foreign_audio,
        tools=tools,
        ocr=ocr,
        output=output,
    )


# Global config instance (lazy loaded)
_config: TrackpickConfig | None = None


def get_config() -> TrackpickConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
