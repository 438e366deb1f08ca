"""REST API for pollbox."""
