"""Release publishing services: lifecycle, changelog, metadata, retries."""
