"""Pure tile services: path parsing, MVT SQL generation and port probing."""
