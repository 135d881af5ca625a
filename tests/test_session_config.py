import pytest

from Sessions import session_config
from Sessions.errors import SessionConfigError
from Sessions.session_config import SessionOptions, ensure_session_secret, get_bool, get_int


def test_default_options():
    options = SessionOptions()
    assert options.session_key_slug == "-session"
    assert options.user_check_key_name == "user_check"
    assert options.namespace == "-session"


def test_options_from_settings():
    options = SessionOptions.from_settings(
        {"SESSION_KEY_SLUG": "-flash", "SESSION_USER_CHECK_KEY": "owner", "SESSION_APP_SLUG": "blog"}
    )
    assert options.namespace == "blog-flash"
    assert options.user_check_key_name == "owner"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"session_key_slug": "", "app_slug": ""},
        {"user_check_key_name": ""},
    ],
)
def test_empty_names_are_rejected(kwargs):
    with pytest.raises(SessionConfigError):
        SessionOptions(**kwargs)


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("SESSION_TEST_FLAG", "TRUE")
    monkeypatch.setenv("SESSION_TEST_INT", "oops")
    assert get_bool("SESSION_TEST_FLAG") is True
    assert get_int("SESSION_TEST_INT", 9) == 9


def test_load_session_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("SESSION_KEY_SLUG", "-custom")
    monkeypatch.setenv("SESSION_MAX_AGE", "120")
    settings = session_config.load_session_settings()
    assert settings["SESSION_KEY_SLUG"] == "-custom"
    assert settings["SESSION_MAX_AGE"] == 120


def test_ensure_session_secret_generates_when_missing(monkeypatch):
    monkeypatch.setenv("SESSION_SECRET_KEY", "")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.setenv("SESSION_ENV_FILE", ".env.does-not-exist")
    secret = ensure_session_secret()
    assert len(secret) > 32
    assert ensure_session_secret() == secret
