"""One-shot loading of the enrollment CSV from a local path or URL."""
