"""
Core Package

Contains the transport-agnostic protocol logic:
- Schemas: Pydantic models for inbound messages and outbound requests
- Classifier: Field-presence classification of untyped JSON frames
- SessionState: Tracked address and last known block count
- Request builder: The four startup requests
- Interfaces: Transport, AccountStore and PreferencesStore contracts

Nothing in this layer performs I/O.
"""
