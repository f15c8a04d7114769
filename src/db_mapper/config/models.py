"""Pydantic models for mapper configuration."""

from pydantic import BaseModel, ConfigDict, Field


class DatabaseProfile(BaseModel):
    """Database connection profile from db.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution


class NamingConfig(BaseModel):
    """Options for deriving external keys and titles from column names.

    Example:
        >>> NamingConfig().uppercase_words
        frozenset({'ID'})
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    uppercase_words: frozenset[str] = frozenset({"ID"})


class MapperConfig(BaseModel):
    """Complete mapper configuration from db.toml."""

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)
    naming: NamingConfig = Field(default_factory=NamingConfig)
