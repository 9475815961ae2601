from .html import parse_html, select_text, strip_html_tags
from .retry_transport import RetryTransport

__all__ = ["RetryTransport", "parse_html", "select_text", "strip_html_tags"]
