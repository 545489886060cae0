"""Desktop client for the blood donation API."""
