"""Small helpers: ids and the outline text parser."""
