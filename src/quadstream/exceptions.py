# Custom exceptions for quadstream

class QuadStreamError(Exception):
    """Base exception for all application-specific errors."""
    pass

class StoreFinalizedError(QuadStreamError):
    """Raised when quads are written into a store that has been finalized."""
    def __init__(self, message: str = "Attempted to write into a finalized StreamingStore"):
        super().__init__(message)

class ChannelClosed(QuadStreamError):
    """Raised by a channel read once the channel is closed and drained."""
    pass

class ChannelStateError(QuadStreamError):
    """Raised on an illegal channel state transition."""
    def __init__(self, channel_key: str, state: str, action: str):
        self.channel_key = channel_key
        self.state = state
        self.action = action
        super().__init__(f"Cannot {action} channel '{channel_key}' in state {state}")

class QuadSyntaxError(QuadStreamError):
    """Raised when N-Quads input cannot be parsed."""
    def __init__(self, line_number: int, line: str, message: str):
        self.line_number = line_number
        self.line = line
        self.message = message
        text = f"Line {line_number}: {message}"
        if line.strip():
            text += f": {line.strip()!r}"
        super().__init__(text)

class ConfigError(QuadStreamError):
    """Raised for configuration-related problems."""
    pass
