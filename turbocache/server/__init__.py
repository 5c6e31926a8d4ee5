"""HTTP surface: authorization gate, access logging, remote-cache routes."""
