# ABOUTME: Exception definitions for AI stage failures.
# ABOUTME: Defines transport and parse errors raised by LLMClient and the JSON payload parser.


class AgentError(Exception):
    """Base class for AI stage errors"""
    pass


class TransportError(AgentError):
    """Raised when a completion call times out, fails at the HTTP layer, or returns nothing"""
    pass


class ParseError(AgentError):
    """Raised when a response holds no usable JSON object even after repair"""
    pass


class NoActionError(AgentError):
    """Raised when every party member skipped or left the action blank"""
    pass
