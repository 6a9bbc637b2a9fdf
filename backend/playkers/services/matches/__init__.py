"""Score updates while a match is live, and the completion step that turns
a finished scorecard into per-player performance rows and career totals."""
