"""External service integrations."""

from .anthropic import AnthropicClient
from .elevenlabs import ElevenLabsClient
from .goenhance import GoEnhanceClient
from .polling import FAILURE_STATUSES, SUCCESS_STATUSES, TaskPoller
from .replicate import ReplicateClient
from .runway import RunwayClient

__all__ = [
    "AnthropicClient",
    "ElevenLabsClient",
    "GoEnhanceClient",
    "ReplicateClient",
    "RunwayClient",
    "TaskPoller",
    "SUCCESS_STATUSES",
    "FAILURE_STATUSES",
]
