"""
Domain Layer

Pure domain types with no Discord or media-backend dependencies.

Structure:
- shared/: exceptions, domain events, constrained types, message constants
- music/: tracks and the playback state machine
- audit/: community activity occurrences and their log-line rendering
"""
