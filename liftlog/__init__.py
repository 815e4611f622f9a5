"""liftlog: local workout logging and progress analytics."""
