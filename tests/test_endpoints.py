from core.endpoints import COMMON_PATH, common_url, object_url, validate_and_suggest_urls


def test_endpoint_urls_hang_off_the_base_url() -> None:
    assert common_url("https://acme.example.com") == "https://acme.example.com/xmlrpc/2/common"
    assert object_url("http://localhost:8069") == "http://localhost:8069/xmlrpc/2/object"


def test_suggestions_for_a_bare_https_host() -> None:
    check = validate_and_suggest_urls("https://acme.example.com")

    assert check.is_valid is True
    assert check.suggestions == [
        "https://acme.example.com/xmlrpc/2/common",
        "https://acme.example.com:8069/xmlrpc/2/common",
        "https://acme.example.com:443/xmlrpc/2/common",
        "https://acme.example.com/odoo/xmlrpc/2/common",
        "https://acme.example.com/web/xmlrpc/2/common",
    ]


def test_suggestions_are_unique_and_stable() -> None:
    first = validate_and_suggest_urls("https://acme.example.com/")
    second = validate_and_suggest_urls("https://acme.example.com/")

    assert first == second
    assert len(first.suggestions) == len(set(first.suggestions))
    assert all(s.endswith(COMMON_PATH) for s in first.suggestions)


def test_explicit_port_is_kept_and_not_doubled() -> None:
    check = validate_and_suggest_urls("http://erp.local:8070")

    assert check.is_valid is True
    assert "http://erp.local:8070/xmlrpc/2/common" in check.suggestions
    assert "http://erp.local:8069/xmlrpc/2/common" in check.suggestions
    assert "http://erp.local:8070/odoo/xmlrpc/2/common" in check.suggestions
    # No ":443" guess when the user already chose a port.
    assert not any(":443" in s for s in check.suggestions)
    assert not any(":8070:" in s for s in check.suggestions)


def test_default_port_counts_as_unspecified() -> None:
    check = validate_and_suggest_urls("https://acme.example.com:443")

    assert check.suggestions == [
        "https://acme.example.com:443/xmlrpc/2/common",
        "https://acme.example.com:8069/xmlrpc/2/common",
        "https://acme.example.com/xmlrpc/2/common",
        "https://acme.example.com/odoo/xmlrpc/2/common",
        "https://acme.example.com/web/xmlrpc/2/common",
    ]


def test_path_in_url_skips_root_suggestion() -> None:
    check = validate_and_suggest_urls("https://acme.example.com/web/login")

    assert check.is_valid is True
    assert "https://acme.example.com/web/login/xmlrpc/2/common" not in check.suggestions
    assert check.suggestions[0] == "https://acme.example.com:8069/xmlrpc/2/common"


def test_missing_scheme_gets_https_and_8069_guesses() -> None:
    check = validate_and_suggest_urls("acme.example.com")

    assert check.is_valid is False
    assert check.suggestions == [
        "https://acme.example.com/xmlrpc/2/common",
        "http://acme.example.com:8069/xmlrpc/2/common",
    ]


def test_unparseable_http_url_has_no_suggestions() -> None:
    check = validate_and_suggest_urls("http://")

    assert check.is_valid is False
    assert check.suggestions == []


def test_bad_port_is_invalid() -> None:
    check = validate_and_suggest_urls("https://acme.example.com:99999")

    assert check.is_valid is False
    assert check.suggestions == []
