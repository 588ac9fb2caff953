"""
Hot Seat - Multiplayer bluffing game server

One player answers a personal question truthfully while everyone else
invents a convincing fake; then the others vote on which answer is real.
The server provides:
- In-memory rooms with join codes
- A phase state machine driven by actions and deadlines
- Scoring for correct guesses and successful bluffs
- Disconnect/reconnect handling that keeps scores intact
"""

__version__ = "0.1.0"
