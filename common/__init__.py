"""Shared configuration and storage engine helpers."""
