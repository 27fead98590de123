"""Quarter engine: player inputs, game state, the phase state machine and a game runner."""
