"""Configuration, constants, exceptions, logging and terminal output."""
