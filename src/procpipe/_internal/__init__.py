"""Internal APIs for procpipe, not covered by versioning policy."""
