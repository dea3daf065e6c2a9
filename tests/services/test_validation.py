import pytest

from wpprovisioner.errors import ProvisionerError
from wpprovisioner.services.validation import ValidationService


def test_validate_domain_normalizes_names_and_accepts_ips():
    service = ValidationService()

    assert service.validate_domain("Blog.Example.com.") == "blog.example.com"
    assert service.validate_domain("localhost") == "localhost"
    assert service.validate_domain("203.0.113.10") == "203.0.113.10"


@pytest.mark.parametrize("domain", ["", "bad_domain.com", "-edge.example.com", "a..b"])
def test_validate_domain_rejects_invalid_names(domain):
    with pytest.raises(ProvisionerError):
        ValidationService().validate_domain(domain)


def test_validate_sql_identifier_rejects_quotes():
    service = ValidationService()

    assert service.validate_sql_identifier("wp_site1", "Database name") == "wp_site1"
    with pytest.raises(ProvisionerError, match="Database user"):
        service.validate_sql_identifier("wp'; DROP", "Database user")


def test_validate_php_size():
    service = ValidationService()

    assert service.validate_php_size("256m", "memory_limit") == "256M"
    assert service.validate_php_size(300, "max_execution_time") == "300"
    with pytest.raises(ProvisionerError, match="memory_limit"):
        service.validate_php_size("lots", "memory_limit")


def test_enforce_https_policy_blocks_plain_http():
    with pytest.raises(ProvisionerError, match="insecure HTTP"):
        ValidationService().enforce_https_policy("http://wordpress.org/latest.tar.gz", "archive")


def test_validate_positive_number():
    service = ValidationService()

    assert service.validate_positive_number("2.5", "http_timeout") == 2.5
    with pytest.raises(ProvisionerError, match="greater than zero"):
        service.validate_positive_number(0, "http_timeout")
    with pytest.raises(ProvisionerError, match="must be a number"):
        service.validate_positive_number("soon", "monitor_interval")
