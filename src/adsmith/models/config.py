"""Configuration models for adsmith."""

from pydantic import BaseModel, Field, HttpUrl, field_validator
from pathlib import Path
from typing import Optional
import yaml
import os
import stat


class ApiConfig(BaseModel):
    """Configuration for the ads management API connection."""

    base_url: HttpUrl = Field(
        ...,
        description="API base URL (e.g., 'https://api.example.com/api')"
    )

    token: Optional[str] = Field(
        default=None,
        description="Bearer token; absent means the session is not signed in"
    )

    timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Request timeout in seconds"
    )

    model_config = {"frozen": True}


class SessionConfig(BaseModel):
    """Role information used by the access guard."""

    role: Optional[str] = Field(
        default=None,
        description="Role of the signed-in user (e.g., 'admin')"
    )

    allowed_roles: Optional[list[str]] = Field(
        default=None,
        description="Roles allowed to open the ads editor (None = any role)"
    )

    model_config = {"frozen": True}


class SiteOption(BaseModel):
    """A site (tenant) that owns its own ad collections."""

    label: str = Field(..., description="Display name")
    value: str = Field(..., min_length=1, description="Site domain sent to the API")

    model_config = {"frozen": True}


DEFAULT_SITES = [
    SiteOption(label="A1 Satta", value="a1satta.pro"),
    SiteOption(label="A3 Satta", value="a3satta.pro"),
    SiteOption(label="A7 Satta", value="a7satta.pro"),
    SiteOption(label="B7 Satta", value="b7satta.pro"),
]


class EditorConfig(BaseModel):
    """Editor presentation defaults."""

    default_image_width: int = Field(
        default=200,
        ge=16,
        le=2000,
        description="Width in pixels of newly inserted images"
    )

    image_widths: list[int] = Field(
        default_factory=lambda: [100, 150, 200, 300],
        description="Preset widths offered by the resize command"
    )

    @field_validator('image_widths')
    @classmethod
    def validate_image_widths(cls, v: list[int]) -> list[int]:
        """Ensure presets are positive and non-empty."""
        if not v:
            raise ValueError("image_widths must contain at least one width")
        if any(width <= 0 for width in v):
            raise ValueError("image_widths must be positive")
        return v

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for adsmith."""

    api: ApiConfig = Field(..., description="Ads API settings")
    session: SessionConfig = Field(default_factory=SessionConfig, description="Access guard settings")
    sites: list[SiteOption] = Field(default_factory=lambda: list(DEFAULT_SITES), description="Selectable sites")
    editor: EditorConfig = Field(default_factory=EditorConfig, description="Editor settings")

    @field_validator('sites')
    @classmethod
    def validate_sites(cls, v: list[SiteOption]) -> list[SiteOption]:
        """Require at least one site and unique site values."""
        if not v:
            raise ValueError("At least one site must be configured")
        values = [site.value for site in v]
        if len(values) != len(set(values)):
            raise ValueError(f"Duplicate site values in config: {values}")
        return v

    def site_values(self) -> list[str]:
        return [site.value for site in self.sites]

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        Validates file permissions before loading when the file holds an API
        token. Raises PermissionError if such a file is group/world readable.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            PermissionError: If file permissions are too open
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at {path}\n\n"
                f"Please create the file with the following format:\n\n"
                f"api:\n"
                f"  base_url: https://api.example.com/api\n"
                f"  token: YOUR_TOKEN_HERE\n\n"
                f"session:\n"
                f"  role: admin\n"
            )

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a YAML mapping")

        if (data.get("api") or {}).get("token"):
            mode = os.stat(path).st_mode
            if mode & (stat.S_IRWXG | stat.S_IRWXO):
                raise PermissionError(
                    f"Config file has overly permissive permissions: {oct(mode)}\n"
                    f"Run: chmod 600 {path}"
                )

        return cls(**data)

    model_config = {"frozen": True}
