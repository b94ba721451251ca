"""
Network Package

Transport implementations for the account service. The account service only
talks to the Transport interface in core/interfaces.py.
"""

from network.ws_transport import WebSocketTransport

__all__ = ["WebSocketTransport"]
