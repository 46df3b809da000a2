"""URL guard for outbound requests."""

from .validation import URLGuard, URLGuardRules, is_private_url, is_valid_url, validate_url

__all__ = ["URLGuard", "URLGuardRules", "is_private_url", "is_valid_url", "validate_url"]
