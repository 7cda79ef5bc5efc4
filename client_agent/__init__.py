"""
Client-side key agent.

Holds the cached access key of a client application, validates it
against the key service and falls back to a local mirror when the
service cannot be reached.
"""
from client_agent.agent import AgentState, ClientKeyAgent
from client_agent.credentials import FileCredentialCache, MemoryCredentialCache
from client_agent.mirror import LocalKeyMirror
from client_agent.transport import HttpKeyServiceTransport

__all__ = [
    "AgentState",
    "ClientKeyAgent",
    "FileCredentialCache",
    "HttpKeyServiceTransport",
    "LocalKeyMirror",
    "MemoryCredentialCache",
]
