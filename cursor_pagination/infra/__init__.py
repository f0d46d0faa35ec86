"""Infrastructure helpers shared by the pagination engine."""
