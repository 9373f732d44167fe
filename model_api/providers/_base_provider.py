import os
from typing import Iterable, Optional

from dotenv import load_dotenv

from ..base import CallModel
from ..exceptions import LLMAuthenticationError, LLMValidationError


def resolve_api_key(api_key: Optional[str], env_var_names: Iterable[str]) -> Optional[str]:
    """Return ``api_key`` or the first non-empty environment variable"""
    if api_key:
        return api_key
    load_dotenv()
    for name in env_var_names:
        value = os.getenv(name)
        if value:
            return value
    return None


class BaseProvider(CallModel):
    """Base class with common provider functionality"""

    api_key_env_vars: tuple = ()

    def _get_api_key(self) -> str:
        """Get API key from instance variable or environment"""
        api_key = resolve_api_key(self.api_key, self.api_key_env_vars)

        if not api_key:
            names = " or ".join(self.api_key_env_vars) or "the provider key"
            raise LLMAuthenticationError(
                message=f"API key required. Set {names} or pass api_key parameter",
                provider=self.__class__.__name__,
                error_type="missing_api_key"
            )

        return api_key

    def _validate_request(self, request):
        """Common request validation"""
        if not request.prompt or not request.prompt.strip():
            raise LLMValidationError(
                message="Request must have a prompt",
                provider=self.__class__.__name__,
                error_type="empty_prompt"
            )

        limit = self.provider_config.max_tokens_limit
        if request.max_tokens and limit and request.max_tokens > limit:
            raise LLMValidationError(
                message=f"max_tokens exceeds limit: {limit}",
                provider=self.__class__.__name__,
                error_type="max_tokens"
            )
