"""Firmware version validation, binary storage and the stable-version pointer."""
