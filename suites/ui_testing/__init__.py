"""UI testing: framework and real-browser suites."""
