import re
import validators
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048

class ValidationError(Exception):
    """Custom exception for validation errors"""
    pass

class RequestValidator:
    """Validator for incoming crawl and profile requests"""

    @staticmethod
    def validate_url(url: Any) -> Tuple[bool, Optional[str]]:
        """Validate URL format before a browser or HTTP client is pointed at it"""
        if not url or not isinstance(url, str):
            return False, "URL must be a non-empty string"

        url = url.strip()

        if len(url) > MAX_URL_LENGTH:
            return False, f"URL must be at most {MAX_URL_LENGTH} characters"

        try:
            parsed = urlparse(url)

            if parsed.scheme not in ['http', 'https']:
                return False, "URL must use HTTP or HTTPS protocol"

            if not parsed.netloc:
                return False, "URL must have a valid domain"

        except Exception as e:
            return False, f"URL parsing error: {str(e)}"

        # Rejects bare hosts such as localhost or intranet names
        if not validators.url(url):
            return False, "Invalid URL format"

        return True, None

    @staticmethod
    def require_url(data: Any) -> str:
        """Return the stripped 'url' field of a JSON body or raise ValidationError"""
        if not isinstance(data, dict) or not data.get('url'):
            raise ValidationError('URL is required')

        is_valid, error = RequestValidator.validate_url(data['url'])
        if not is_valid:
            raise ValidationError(f'Invalid URL: {error}')

        return data['url'].strip()

    @staticmethod
    def optional_flag(data: Dict[str, Any], name: str) -> bool:
        """Return a boolean body field, False when absent; anything else raises ValidationError"""
        value = data.get(name, False)
        if value is None:
            return False
        if not isinstance(value, bool):
            raise ValidationError(f"'{name}' must be a boolean")
        return value

    @staticmethod
    def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
        """Collapse whitespace and optionally truncate"""
        if not text or not isinstance(text, str):
            return ""

        sanitized = re.sub(r'\s+', ' ', text.strip())

        # Truncate if necessary
        if max_length and len(sanitized) > max_length:
            sanitized = sanitized[:max_length].strip()

        return sanitized
