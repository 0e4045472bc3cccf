"""
Application Layer

Orchestrates domain objects and infrastructure adapters.

Structure:
- services/: the playback driver and the queue mutation service
- interfaces/: port interfaces for infrastructure adapters
"""
