"""Unit tests for configuration models and loading."""

import pytest
import yaml
from pydantic import ValidationError

from adsmith.config.loader import load_config
from adsmith.models.config import ApiConfig, Config, EditorConfig, SiteOption


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ADSMITH_* variables from the developer's shell out of these tests."""
    for name in ("ADSMITH_API_BASE_URL", "ADSMITH_API_TOKEN", "ADSMITH_API_TIMEOUT", "ADSMITH_SESSION_ROLE"):
        monkeypatch.delenv(name, raising=False)


def write_config(path, data, mode=0o600):
    path.write_text(yaml.dump(data))
    path.chmod(mode)
    return path


class TestApiConfig:
    """Tests for ApiConfig validation."""

    def test_valid(self):
        """Test a base URL and token are accepted."""
        config = ApiConfig(base_url="https://api.example.com/api", token="secret")

        assert str(config.base_url).startswith("https://api.example.com/api")
        assert config.timeout == 30.0

    def test_invalid_url(self):
        """Test a non-URL base is rejected."""
        with pytest.raises(ValidationError):
            ApiConfig(base_url="not a url")

    def test_timeout_bounds(self):
        """Test the timeout must be positive and at most 300 seconds."""
        with pytest.raises(ValidationError):
            ApiConfig(base_url="https://api.example.com", timeout=0)
        with pytest.raises(ValidationError):
            ApiConfig(base_url="https://api.example.com", timeout=301)


class TestConfig:
    """Tests for the root Config model."""

    def test_default_sites(self):
        """Test the four known sites are configured by default."""
        config = Config(api=ApiConfig(base_url="https://api.example.com"))

        assert config.site_values() == ["a1satta.pro", "a3satta.pro", "a7satta.pro", "b7satta.pro"]
        assert config.editor.default_image_width == 200

    def test_duplicate_sites_rejected(self):
        """Test site values must be unique."""
        with pytest.raises(ValidationError):
            Config(
                api=ApiConfig(base_url="https://api.example.com"),
                sites=[SiteOption(label="A", value="a.pro"), SiteOption(label="B", value="a.pro")],
            )

    def test_empty_sites_rejected(self):
        """Test at least one site is required."""
        with pytest.raises(ValidationError):
            Config(api=ApiConfig(base_url="https://api.example.com"), sites=[])

    def test_image_widths_must_be_positive(self):
        """Test resize presets are validated."""
        with pytest.raises(ValidationError):
            EditorConfig(image_widths=[100, -5])


class TestConfigLoad:
    """Tests for Config.load and load_config."""

    def test_load_from_file(self, tmp_path):
        """Test a YAML file with a token loads when it is private."""
        path = write_config(tmp_path / "config.yaml", {
            "api": {"base_url": "https://api.example.com/api", "token": "secret"},
            "session": {"role": "admin", "allowed_roles": ["admin"]},
            "sites": [{"label": "A1", "value": "a1satta.pro"}],
        })

        config = Config.load(path)

        assert config.api.token == "secret"
        assert config.session.role == "admin"
        assert config.site_values() == ["a1satta.pro"]

    def test_permissive_file_with_token_rejected(self, tmp_path):
        """Test a group/world readable token file is refused."""
        path = write_config(
            tmp_path / "config.yaml",
            {"api": {"base_url": "https://api.example.com", "token": "secret"}},
            mode=0o644,
        )

        with pytest.raises(PermissionError, match="chmod 600"):
            Config.load(path)

    def test_permissive_file_without_token_allowed(self, tmp_path):
        """Test permissions only matter when the file holds a token."""
        path = write_config(tmp_path / "config.yaml", {"api": {"base_url": "https://api.example.com"}}, mode=0o644)

        assert Config.load(path).api.token is None

    def test_missing_file(self, tmp_path):
        """Test a missing file without an env base URL is an error."""
        with pytest.raises(FileNotFoundError, match="ADSMITH_API_BASE_URL"):
            load_config(tmp_path / "missing.yaml")

    def test_non_mapping_file(self, tmp_path):
        """Test a YAML list is not a valid config."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError):
            Config.load(path)

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test ADSMITH_* variables take precedence over the file."""
        path = write_config(tmp_path / "config.yaml", {
            "api": {"base_url": "https://api.example.com/api", "token": "from-file"},
        })
        monkeypatch.setenv("ADSMITH_API_TOKEN", "from-env")
        monkeypatch.setenv("ADSMITH_API_TIMEOUT", "5")
        monkeypatch.setenv("ADSMITH_SESSION_ROLE", "editor")

        config = load_config(path)

        assert config.api.token == "from-env"
        assert config.api.timeout == 5.0
        assert config.session.role == "editor"

    def test_env_only(self, tmp_path, monkeypatch):
        """Test configuration can come from the environment alone."""
        monkeypatch.setenv("ADSMITH_API_BASE_URL", "https://env.example.com/api")

        config = load_config(tmp_path / "missing.yaml")

        assert str(config.api.base_url).startswith("https://env.example.com/api")

    def test_invalid_timeout_env_ignored(self, tmp_path, monkeypatch):
        """Test a non-numeric timeout override is ignored."""
        monkeypatch.setenv("ADSMITH_API_BASE_URL", "https://env.example.com/api")
        monkeypatch.setenv("ADSMITH_API_TIMEOUT", "soon")

        assert load_config(tmp_path / "missing.yaml").api.timeout == 30.0
