from .client import GeminiClient, GeminiAPIError, get_ai_client
from .retry import is_transient_error, retry_with_backoff
from .service import analyze_image, generate_recipe
from .parsing import parse_analysis, parse_recipe

__all__ = [
    "GeminiAPIError",
    "GeminiClient",
    "analyze_image",
    "generate_recipe",
    "get_ai_client",
    "is_transient_error",
    "parse_analysis",
    "parse_recipe",
    "retry_with_backoff",
]
