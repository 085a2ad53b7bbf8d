"""Settings, credentials, errors, project context and the subprocess registry."""
