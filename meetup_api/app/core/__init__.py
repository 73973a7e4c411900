"""Configuration, persistence, security and error primitives shared by all domains."""
