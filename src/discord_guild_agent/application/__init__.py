"""
Application Layer

Contains use cases, the command router, and application services.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- commands/: the text command router and its request/reply types
- services/: queue state store, playback orchestrator, idle reclaim, audit service
- interfaces/: port interfaces for infrastructure adapters
"""
