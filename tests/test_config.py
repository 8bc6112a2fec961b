"""Test credentials and configuration loading."""
import pytest

from customerio.config import ClientConfig, WebhookConfig
from customerio.credentials import CREDENTIAL_PROPERTIES, CustomerIoCredentials, credential_test_request
from customerio.errors import ConfigurationError, CredentialsError


def test_credentials_from_env(monkeypatch):
    monkeypatch.setenv("CUSTOMERIO_SITE_ID", "site")
    monkeypatch.setenv("CUSTOMERIO_TRACK_API_KEY", "track-key")
    monkeypatch.setenv("CUSTOMERIO_APP_API_KEY", "app-key")
    monkeypatch.setenv("CUSTOMERIO_REGION", "EU")
    creds = CustomerIoCredentials.from_env()
    assert creds.region == "eu"
    assert creds.bearer_auth == "Bearer app-key"


def test_credentials_validation():
    with pytest.raises(CredentialsError, match="Unknown region"):
        CustomerIoCredentials(site_id="s", track_api_key="t", app_api_key="a", region="apac")
    with pytest.raises(CredentialsError, match="app_api_key"):
        CustomerIoCredentials(site_id="s", track_api_key="t", app_api_key="")


def test_credentials_repr_hides_keys():
    creds = CustomerIoCredentials(site_id="s", track_api_key="secret-track", app_api_key="secret-app")
    assert "secret" not in repr(creds)


def test_credential_form_marks_keys_as_passwords():
    passwords = {prop.name for prop in CREDENTIAL_PROPERTIES if prop.password}
    assert passwords == {"track_api_key", "app_api_key"}


def test_credential_test_request():
    creds = CustomerIoCredentials(site_id="s", track_api_key="t", app_api_key="a")
    req = credential_test_request(creds)
    assert req["method"] == "GET"
    assert req["url"] == "https://track.customer.io/auth"
    assert req["headers"]["Authorization"] == creds.basic_auth


def test_client_config_from_env(monkeypatch):
    monkeypatch.setenv("CUSTOMERIO_TIMEOUT", "5")
    monkeypatch.setenv("CUSTOMERIO_PAGE_SIZE", "250")
    config = ClientConfig.from_env()
    assert config.timeout == 5.0
    assert config.page_size == 250
    assert ClientConfig.default().page_size == 100


def test_client_config_rejects_malformed_numbers(monkeypatch):
    monkeypatch.setenv("CUSTOMERIO_TIMEOUT", "soon")
    with pytest.raises(ConfigurationError, match="CUSTOMERIO_TIMEOUT must be a number"):
        ClientConfig.from_env()

    monkeypatch.setenv("CUSTOMERIO_TIMEOUT", "5")
    monkeypatch.setenv("CUSTOMERIO_PAGE_SIZE", "2.5")
    with pytest.raises(ConfigurationError, match="CUSTOMERIO_PAGE_SIZE"):
        ClientConfig.from_env()


def test_webhook_config_from_env(monkeypatch):
    monkeypatch.setenv("CUSTOMERIO_WEBHOOK_EVENTS", "email_opened, email_clicked,")
    monkeypatch.setenv("CUSTOMERIO_VALIDATE_SIGNATURE", "no")
    monkeypatch.delenv("CUSTOMERIO_WEBHOOK_SIGNING_KEY", raising=False)
    config = WebhookConfig.from_env()
    assert config.events == ("email_opened", "email_clicked")
    assert config.validate_signature is False
    assert config.to_parameters() == {
        "events": ["email_opened", "email_clicked"],
        "options": {"validate_signature": False},
    }


def test_webhook_config_defaults():
    config = WebhookConfig.default()
    assert config.events == ()
    assert config.validate_signature is True
    assert WebhookConfig(signing_key="k").to_parameters()["options"]["webhook_signing_key"] == "k"
