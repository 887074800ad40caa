"""Indoor positioning and pathfinding for workspace floor plans."""
