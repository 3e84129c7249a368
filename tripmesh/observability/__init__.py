"""In-process runtime metrics."""
