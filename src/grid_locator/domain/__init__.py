"""Result records returned by the assignment resolver."""
