"""Feed configuration models.

Every knob of the store, router, filter pipeline and render scheduler is a
Pydantic field with the defaults the client ships with, so a YAML file only
needs to list what it changes.

Examples:
    ```yaml
    render:
      delay: 0.5
    tabs:
      show_channel_messages: true
    pipeline:
      forbidden_words: [spam, scam]
    session:
      pubkey: npub1...
    ```

See Also:
    [FeedContext.from_config()][flowgazer.feed.context.FeedContext.from_config]:
        Builds a wired store/router pair from a
        [FeedConfig][flowgazer.feed.configs.FeedConfig].
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Self

from pydantic import BaseModel, Field, ValidationError, field_validator

from flowgazer.core.exceptions import ConfigurationError
from flowgazer.core.yaml import load_yaml
from flowgazer.utils.keys import SessionConfig


class SelfExclusion(StrEnum):
    """How global/following keep the local identity's own activity out.

    Attributes:
        AUTHOR: Drop events authored by the local identity.
        AUTHOR_MENTION: Also drop events whose p-tags mention it.
        AUTHOR_MENTION_REPOST: Also drop reposts of its own notes.
    """

    AUTHOR = "author"
    AUTHOR_MENTION = "author_mention"
    AUTHOR_MENTION_REPOST = "author_mention_repost"


class RenderConfig(BaseModel):
    """Debounced repaint settings."""

    delay: float = Field(default=0.3, ge=0.0, le=10.0, description="Debounce delay in seconds")
    auto_update: bool = Field(default=True, description="Repaint on live events")


class TabsConfig(BaseModel):
    """Membership policy switches."""

    show_channel_messages: bool = Field(
        default=False, description="Include kind 42 in global/following"
    )
    channel_messages_in_personal_tabs: bool = Field(
        default=False, description="Include kind 42 in myposts/likes"
    )
    likes_include_reposts_and_mentions: bool = Field(
        default=True, description="Route reposts and notes tagging the local identity to likes"
    )
    self_exclusion: SelfExclusion = Field(
        default=SelfExclusion.AUTHOR_MENTION_REPOST,
        description="Self-content exclusion policy for global/following",
    )


class PipelineConfig(BaseModel):
    """Render-time filter pipeline settings."""

    max_note_length: int = Field(default=190, ge=1, description="Longest note shown in public tabs")
    covisibility_window: int = Field(
        default=150, ge=1, description="Notes that bound how far back reposts may reach"
    )
    client_tag: str = Field(default="flowgazer", min_length=1, description="Client-only tag value")
    forbidden_words: list[str] = Field(default_factory=list, description="Blocked substrings")

    @field_validator("forbidden_words", mode="after")
    @classmethod
    def _normalize_words(cls, v: list[str]) -> list[str]:
        return [word.lower() for word in v if word.strip()]


class PaginationConfig(BaseModel):
    """Query sizes and the cursor fallback anchor."""

    load_more_limit: int = Field(default=50, ge=1, le=5000)
    fallback_lookback: int = Field(
        default=900, ge=0, description="Seconds before now used as a fallback until"
    )
    main_timeline_limit: int = Field(default=150, ge=1, le=5000)
    notification_limit: int = Field(default=50, ge=1, le=5000)
    history_limit: int = Field(default=100, ge=1, le=5000)
    reaction_target_limit: int = Field(
        default=100, ge=1, description="Own note ids watched for reactions"
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_output: bool = False


class FeedConfig(BaseModel):
    """Top-level configuration for a [FeedContext][flowgazer.feed.context.FeedContext]."""

    render: RenderConfig = Field(default_factory=RenderConfig)
    tabs: TabsConfig = Field(default_factory=TabsConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    self_feed_size: int = Field(default=200, ge=1, le=10_000)

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Validate a plain dictionary.

        Raises:
            ConfigurationError: If validation fails.
        """
        try:
            return cls.model_validate(data)
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid feed configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> Self:
        """Load and validate a YAML configuration file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the YAML or the schema is invalid.
        """
        return cls.from_dict(load_yaml(config_path))
