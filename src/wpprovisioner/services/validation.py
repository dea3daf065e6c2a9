"""Input and URL validation helpers for wpprovisioner."""

import ipaddress
import re
from urllib.parse import urlparse

from wpprovisioner.errors import ProvisionerError
from wpprovisioner.errors_catalog import actionable_error


class ValidationService:
    """Validates operator-supplied settings before anything touches the host."""

    HOSTNAME_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
    PHP_SIZE = re.compile(r"^\d+[KMG]?$", re.IGNORECASE)
    SQL_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]{1,64}$")

    def is_url(self, location: str) -> bool:
        scheme = urlparse(location).scheme.lower()
        return scheme in {"http", "https"}

    def enforce_https_policy(self, location: str, label: str):
        if urlparse(location).scheme.lower() != "https":
            raise ProvisionerError(actionable_error("insecure_http", label=label))

    def validate_domain(self, domain: str) -> str:
        clean = (domain or "").strip().rstrip(".").lower()
        if not clean:
            raise ProvisionerError("Domain must not be empty.")

        try:
            ipaddress.ip_address(clean)
            return clean
        except ValueError:
            pass

        if len(clean) > 253 or not all(self.HOSTNAME_LABEL.match(label) for label in clean.split(".")):
            raise ProvisionerError(f"Invalid domain name: {domain}")
        return clean

    def validate_sql_identifier(self, value: str, label: str) -> str:
        if not isinstance(value, str) or not self.SQL_IDENTIFIER.match(value):
            raise ProvisionerError(
                f"{label} must be 1-64 characters of letters, digits or underscores: {value!r}"
            )
        return value

    def validate_php_size(self, value: str, label: str) -> str:
        clean = str(value).strip()
        if not self.PHP_SIZE.match(clean):
            raise ProvisionerError(f"{label} must look like '64M' or '1G': {value!r}")
        return clean.upper()

    def validate_positive_number(self, value, label: str) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ProvisionerError(f"{label} must be a number: {value!r}") from None
        if number <= 0:
            raise ProvisionerError(f"{label} must be greater than zero: {value!r}")
        return number
