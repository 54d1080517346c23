from urllib.parse import parse_qs, urlparse

import pytest

from pushauth.client.models.errors import OAuth2ConfigurationError
from pushauth.client.models.flow import AuthorizationRequest
from pushauth.client.models.options import OAuth2Options


class TestAuthorizationUrl:
    def setup_method(self):
        # Arrange
        self.options = OAuth2Options(
            app_id="client-123",
            response_type="code",
            redirect_url="com.example.app:/callback",
            scope="openid",
            authorization_base_url="https://auth.example.com/authorize",
        )

    def test_pushed_request_uses_request_uri_only(self):
        # Arrange
        options = self.options.with_par_request_uri(
            "urn:ietf:params:oauth:request_uri:abc123"
        )

        # Act
        url = AuthorizationRequest.from_options(options).build_authorization_url()

        # Assert
        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert parsed.netloc == "auth.example.com"
        assert parsed.path == "/authorize"
        assert query == {
            "client_id": ["client-123"],
            "request_uri": ["urn:ietf:params:oauth:request_uri:abc123"],
        }

    def test_without_request_uri_sends_full_parameters(self):
        # Act
        url = AuthorizationRequest.from_options(self.options).build_authorization_url()

        # Assert
        query = parse_qs(urlparse(url).query)
        assert query["client_id"] == ["client-123"]
        assert query["response_type"] == ["code"]
        assert query["redirect_uri"] == ["com.example.app:/callback"]
        assert query["scope"] == ["openid"]
        assert "request_uri" not in query

    def test_existing_query_is_preserved(self):
        # Arrange
        options = OAuth2Options(
            app_id="client-123",
            response_type="code",
            authorization_base_url="https://auth.example.com/authorize?tenant=a",
            par_request_uri="urn:example",
        )

        # Act
        url = AuthorizationRequest.from_options(options).build_authorization_url()

        # Assert
        assert url == (
            "https://auth.example.com/authorize"
            "?tenant=a&client_id=client-123&request_uri=urn%3Aexample"
        )

    def test_missing_base_url_raises(self):
        # Arrange
        options = OAuth2Options(app_id="client-123", response_type="code")

        # Act & Assert
        with pytest.raises(OAuth2ConfigurationError):
            AuthorizationRequest.from_options(options)
