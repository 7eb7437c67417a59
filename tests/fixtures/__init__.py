"""Sample steps and errors for pipeline tests."""
