"""Configuration, logging, persistence, identity and error primitives."""
