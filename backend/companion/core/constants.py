"""
Centralized constants for the chat pipeline.

Change canned replies and limits here instead of scattering literals across
services and routes. Tunables that operators change live in config.Settings.
"""

# Session titles
DEFAULT_SESSION_TITLE = "New Chat"
SESSION_TITLE_MAX_CHARS = 50  # title taken from the first message is cut here
SESSION_TITLE_ELLIPSIS = "..."
SESSION_ID_PREFIX = "session-"
SESSION_ID_MAX_LENGTH = 64  # sessions.id column
SESSION_TITLE_MAX_LENGTH = 200  # sessions.title column

# Canned replies (chat route keeps the {response, mood, mode} shape on failure)
MSG_EMPTY_MESSAGE = "I didn't catch that. Can you type something?"
MSG_CHAT_FAILED = "Something went wrong. Let's try that again."
MSG_CONFIGURATION = "Service temporarily unavailable - configuration issue"
MSG_SESSION_NOT_FOUND = "Session not found."
MSG_EMPTY_TITLE = "Title must not be empty."
MSG_INVALID_REQUEST = "That request didn't look right. Please check it and try again."
MSG_REQUEST_FAILED = "Something went wrong. Please try again."

# Degraded generation replies
MSG_RATE_LIMITED = "I'm getting rate limited. Give me a minute and try again! 🕐"
MSG_REPHRASE = "Something about that message confused me. Can you rephrase it? 🤔"
MSG_CONNECTION_TROUBLE = "I'm having trouble connecting right now. Can you try again? 🔄"

# Provider status codes that are 4xx but still worth another attempt
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})
STATUS_RATE_LIMITED = 429

# Log previews
LOG_MESSAGE_PREVIEW_CHARS = 40
