"""HTTP surface for the note store."""
