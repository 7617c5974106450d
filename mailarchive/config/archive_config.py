"""Configuration models for the email archive."""

from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_string_list(value: Any) -> List[str]:
    """Coerce a wrongly shaped rule list to a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set)):
        return [item for item in value if isinstance(item, str)]
    return []


class IgnoreRulesConfig(BaseModel):
    """Rules that suppress archiving of matching messages."""

    model_config = ConfigDict(populate_by_name=True)

    from_: List[str] = Field(default_factory=list, alias="from")
    to: List[str] = Field(default_factory=list)
    subject_regex: List[str] = Field(default_factory=list)
    templates: List[str] = Field(default_factory=list)

    @field_validator("from_", "to", "subject_regex", "templates", mode="before")
    def coerce_lists(cls, v: Any) -> List[str]:
        return _coerce_string_list(v)


class ArchiveConfig(BaseModel):
    """Main email archive configuration."""

    enabled: bool = True
    archive_root: str = "var/email"
    max_preview_bytes: int = Field(default=2_000_000, ge=1)
    max_attachment_bytes: int = Field(default=50_000_000, ge=1)
    ignore_rules: IgnoreRulesConfig = Field(default_factory=IgnoreRulesConfig)
    log_dir: Optional[str] = None

    @field_validator("ignore_rules", mode="before")
    def coerce_ignore_rules(cls, v: Any) -> Any:
        if isinstance(v, (dict, IgnoreRulesConfig)):
            return v
        return {}

    def get_archive_root(self) -> Path:
        """Get expanded archive root path."""
        return Path(self.archive_root).expanduser()

    def get_log_dir(self) -> Optional[Path]:
        """Get expanded log directory, if configured."""
        return Path(self.log_dir).expanduser() if self.log_dir else None
