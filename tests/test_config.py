import pytest

from core.config import ConfigError, load_config, normalize_url

NEW_STYLE = {
    "ODOO_HOST": "https://acme.example.com",
    "ODOO_DB": "acme",
    "ODOO_USER": "bot@acme.example.com",
    "ODOO_PASS": "secret",
}

LEGACY_STYLE = {
    "ODOO_URL": "http://erp.local:8069/web/login",
    "ODOO_DATABASE": "legacy",
    "ODOO_USERNAME": "admin",
    "ODOO_API_KEY": "key-123",
}


def test_new_names() -> None:
    config = load_config(NEW_STYLE)

    assert config.url == "https://acme.example.com"
    assert config.database == "acme"
    assert config.username == "bot@acme.example.com"
    assert config.password == "secret"


def test_legacy_names_and_url_is_reduced_to_root() -> None:
    config = load_config(LEGACY_STYLE)

    assert config.url == "http://erp.local:8069"
    assert config.database == "legacy"
    assert config.password == "key-123"


def test_new_names_win_over_legacy() -> None:
    config = load_config({**LEGACY_STYLE, **NEW_STYLE})

    assert config.url == "https://acme.example.com"
    assert config.database == "acme"


def test_schemes_can_be_mixed_per_setting() -> None:
    config = load_config({**LEGACY_STYLE, "ODOO_DB": "override"})

    assert config.database == "override"
    assert config.username == "admin"


def test_missing_settings_are_all_listed() -> None:
    with pytest.raises(ConfigError) as exc_info:
        load_config({"ODOO_HOST": "https://acme.example.com", "ODOO_USER": "bot"})

    message = str(exc_info.value)
    assert message.startswith("Missing required configuration: ODOO_DB/ODOO_DATABASE, ODOO_PASS/ODOO_API_KEY.")
    assert "ODOO_HOST/ODOO_DB/ODOO_USER/ODOO_PASS" in message


def test_password_is_not_in_repr() -> None:
    assert "secret" not in repr(load_config(NEW_STYLE))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://acme.example.com/", "https://acme.example.com"),
        ("https://acme.example.com/odoo/action-12?debug=1", "https://acme.example.com"),
        (" http://10.0.0.5:8069 ", "http://10.0.0.5:8069"),
        ("http://[::1]:8069/web", "http://[::1]:8069"),
    ],
)
def test_normalize_url(raw, expected) -> None:
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", ["acme.example.com", "ftp://acme.example.com", "https://acme.example.com:99999"])
def test_normalize_url_rejects_bad_urls(raw) -> None:
    with pytest.raises(ConfigError, match="Invalid Odoo URL"):
        normalize_url(raw)
