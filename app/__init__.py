"""
FastAPI Application Package

Bridges the account service to consumers over HTTP and WebSockets: classified
messages and connection events are streamed, and a refresh can be requested.
"""
