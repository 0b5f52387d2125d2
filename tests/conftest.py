import pytest

from authflow.models.config import AuthConfig


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(
        base_url="https://auth.example.com",
        authorize_endpoint="/oauth/authorize",
        token_endpoint="/oauth/token",
        client_id="client-123",
        redirect_uri="myapp://redirect",
        scope="read write",
    )
