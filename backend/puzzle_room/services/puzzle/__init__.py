"""Puzzle domain services: board generation, session transitions and room cleanup.

These modules hold the game mechanics shared by the socket handlers and the
HTTP API, keeping transport concerns out of the state machine.
"""
