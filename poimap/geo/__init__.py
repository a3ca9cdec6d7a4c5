"""Geographic primitives: coordinates, POIs and the screen projection."""
