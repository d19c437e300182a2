"""Campus events: upcoming event listing, details with registrants, capacity-checked registration."""
