"""Integration tests that run ``tudu`` as a subprocess."""
