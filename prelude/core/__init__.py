"""
Capture and replay engine.

Pure domain code: event types, the client-side event tracker, paste
provenance validation, replay reconstruction and idle compression. Nothing in
this package touches the database or the HTTP layer.
"""
