"""Request builders and response parsers for the stream and the store."""
