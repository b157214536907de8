"""skinproxy tests."""
