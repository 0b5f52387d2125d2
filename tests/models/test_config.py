import pytest
from pydantic import ValidationError

from authflow.models.config import AuthConfig
from authflow.models.errors import InvalidEndpointConfiguration

ENV = {
    "AUTHFLOW_BASE_URL": "https://auth.example.com",
    "AUTHFLOW_AUTHORIZE_ENDPOINT": "/oauth/authorize",
    "AUTHFLOW_TOKEN_ENDPOINT": "/oauth/token",
    "AUTHFLOW_CLIENT_ID": "client-123",
    "AUTHFLOW_REDIRECT_URI": "myapp://redirect",
    "AUTHFLOW_SCOPE": "read write",
}


def clear_env(monkeypatch):
    # setenv first so monkeypatch also undoes what load_dotenv writes
    for key in [*ENV, "AUTHFLOW_USE_STATE"]:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


class TestAuthConfig:
    def test_derived_urls(self, auth_config):
        assert auth_config.authorization_url == "https://auth.example.com/oauth/authorize"
        assert auth_config.token_url == "https://auth.example.com/oauth/token"
        assert auth_config.redirect_scheme == "myapp"
        assert auth_config.response_type == "code"
        assert auth_config.code_challenge_method == "S256"
        assert auth_config.use_state is False

    def test_empty_field_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(
                base_url="https://auth.example.com",
                authorize_endpoint="/oauth/authorize",
                token_endpoint="/oauth/token",
                client_id="   ",
                redirect_uri="myapp://redirect",
                scope="read",
            )

    def test_unsupported_challenge_method_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(
                base_url="https://auth.example.com",
                authorize_endpoint="/oauth/authorize",
                token_endpoint="/oauth/token",
                client_id="client-123",
                redirect_uri="myapp://redirect",
                scope="read",
                code_challenge_method="plain",
            )

    def test_config_is_immutable(self, auth_config):
        with pytest.raises(ValidationError):
            auth_config.client_id = "other"


class TestFromEnv:
    def setup_method(self):
        self.missing_dotenv = "/nonexistent/authflow/.env"

    def test_loads_all_fields(self, monkeypatch):
        # Arrange
        for key, value in ENV.items():
            monkeypatch.setenv(key, value)
        monkeypatch.setenv("AUTHFLOW_USE_STATE", "true")

        # Act
        config = AuthConfig.from_env(dotenv_path=self.missing_dotenv)

        # Assert
        assert config.base_url == "https://auth.example.com"
        assert config.client_id == "client-123"
        assert config.scope == "read write"
        assert config.use_state is True

    def test_missing_variables_are_configuration_errors(self, monkeypatch):
        # Arrange
        for key, value in ENV.items():
            monkeypatch.setenv(key, value)
        monkeypatch.delenv("AUTHFLOW_CLIENT_ID")
        monkeypatch.setenv("AUTHFLOW_SCOPE", "")

        # Act & Assert
        with pytest.raises(InvalidEndpointConfiguration) as exc_info:
            AuthConfig.from_env(dotenv_path=self.missing_dotenv)

        assert "AUTHFLOW_CLIENT_ID" in str(exc_info.value)
        assert "AUTHFLOW_SCOPE" in str(exc_info.value)

    def test_reads_dotenv_file(self, monkeypatch, tmp_path):
        # Arrange
        clear_env(monkeypatch)
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text(
            "\n".join(f"{key}={value}" for key, value in ENV.items())
        )

        # Act
        config = AuthConfig.from_env(dotenv_path=str(dotenv_file))

        # Assert
        assert config.token_endpoint == "/oauth/token"
        assert config.use_state is False

    def test_finds_dotenv_in_working_directory(self, monkeypatch, tmp_path):
        # Arrange
        clear_env(monkeypatch)
        (tmp_path / ".env").write_text(
            "\n".join(f"{key}={value}" for key, value in ENV.items())
            + "\nAUTHFLOW_USE_STATE=yes\n"
        )
        monkeypatch.chdir(tmp_path)

        # Act
        config = AuthConfig.from_env()

        # Assert
        assert config.base_url == "https://auth.example.com"
        assert config.client_id == "client-123"
        assert config.use_state is True
