"""Actionable error catalog for wpprovisioner."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "privilege_required": {
        "what": "This installer must be run as root.",
        "next": "Re-run it with `sudo wpprovisioner`.",
    },
    "confirmation_declined": {
        "what": "Installation cancelled before any change was made.",
        "next": "Re-run and answer `y`, or pass `--yes` for unattended installs.",
    },
    "step_failed": {
        "what": "Provisioning step '{step}' failed: {reason}",
        "next": "Inspect `{log_file}`, fix the cause and re-run the installer.",
    },
    "server_ip_unknown": {
        "what": "Could not determine the server IP address from `hostname -I`.",
        "next": "Check that a network interface is configured and up.",
    },
    "php_version_undetected": {
        "what": "Could not determine the installed PHP version from `php -v`.",
        "next": "Verify that the php-fpm packages installed correctly.",
    },
    "salts_unavailable": {
        "what": "Could not fetch authentication salts from {url}.",
        "next": "Check outbound HTTPS connectivity to api.wordpress.org.",
    },
    "insecure_http": {
        "what": "{label} uses insecure HTTP.",
        "next": "Use an HTTPS URL for downloads.",
    },
    "verification_failed": {
        "what": "Post-install verification failed: {reason}",
        "next": "Check `systemctl status` for the listed services and `{log_file}`.",
    },
}


SUGGESTION_MARKER = "Suggested action:"


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} {SUGGESTION_MARKER} {next_step}"


def step_failure(step: str, reason: str, log_file: str) -> str:
    """Names the failed step; a reason that already suggests an action is kept as is."""
    if SUGGESTION_MARKER in reason:
        return _ERROR_MESSAGES["step_failed"]["what"].format(step=step, reason=reason)
    return actionable_error("step_failed", step=step, reason=reason, log_file=log_file)
