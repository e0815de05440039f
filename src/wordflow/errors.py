"""Error taxonomy shared by providers, the response parser and the queue."""

import re
from typing import Any


class WordFlowError(Exception):
    """Base class for all errors raised by the translation pipeline."""


class ProviderNotConfiguredError(WordFlowError):
    """The provider has no credential; fatal for the whole run."""

    def __init__(self, provider: str):
        super().__init__(f"Provider '{provider}' is not configured (missing API key)")
        self.provider = provider


class UnknownProviderError(WordFlowError, ValueError):
    """No provider is registered under the requested name."""


class CapabilityNotSupportedError(WordFlowError):
    """The provider does not implement an optional capability."""

    def __init__(self, provider: str, capability: str):
        super().__init__(f"Provider '{provider}' does not support '{capability}'")
        self.provider = provider
        self.capability = capability


class MissingTemplateError(WordFlowError):
    """No style template (or an empty prompt body) was supplied."""

    def __init__(self, message: str = "A style template with a prompt body is required"):
        super().__init__(message)


class RateLimitedError(WordFlowError):
    """The provider rejected the request because of rate limits or quota."""


class ResponseParseError(WordFlowError):
    """The model output could not be decoded; fatal for the batch only."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class BatchTimeoutError(WordFlowError):
    """A batch exceeded the per-batch timeout; handled like any non-rate-limit failure."""


class InvalidTransitionError(WordFlowError):
    """A row status change that the state machine does not allow."""

    def __init__(self, current: Any, target: Any):
        super().__init__(f"Cannot move row from '{current}' to '{target}'")
        self.current = current
        self.target = target


_RATE_LIMIT_PATTERN = re.compile(
    r"\b429\b|rate.?limit|quota|resource.?exhausted|too many requests", re.IGNORECASE
)


def is_rate_limit_error(error: BaseException) -> bool:
    """Return True when an arbitrary SDK/transport error means HTTP 429."""
    if isinstance(error, RateLimitedError):
        return True
    for attr in ("status_code", "status", "code", "http_status"):
        value = getattr(error, attr, None)
        if value == 429 or value == "429":
            return True
    response = getattr(error, "response", None)
    if response is not None and getattr(response, "status_code", None) == 429:
        return True
    return bool(_RATE_LIMIT_PATTERN.search(str(error)))
