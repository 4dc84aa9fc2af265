"""Editor-independent prompt, request, stream and state logic."""

from .client_state import ClientState, ClientStateMeta, Initialization
from .generation import PreparedRequest, PromptGenerator
from .messages import END_OF_TURN, ROLES, Message, messages_to_prompt, parse_messages, role_template
from .request_builder import RequestParams, build_chat_request, build_completion_request, endpoint_url
from .share_codec import ShareDecodeError, decode_state, encode_state
from .state_sync import StateSyncEngine
from .streaming import StreamAssembler, StreamState, iter_stream_deltas
from .transport import TransportError, post_stream

__all__ = [
    "ClientState",
    "ClientStateMeta",
    "END_OF_TURN",
    "Initialization",
    "Message",
    "PreparedRequest",
    "PromptGenerator",
    "ROLES",
    "RequestParams",
    "ShareDecodeError",
    "StateSyncEngine",
    "StreamAssembler",
    "StreamState",
    "TransportError",
    "build_chat_request",
    "build_completion_request",
    "decode_state",
    "encode_state",
    "endpoint_url",
    "iter_stream_deltas",
    "messages_to_prompt",
    "parse_messages",
    "post_stream",
    "role_template",
]
