"""Letterbox CLI Module - command line board client and config commands."""
