"""Interactive player: decoder supervision, position tracking and the tick loop."""
