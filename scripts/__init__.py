"""Maintenance scripts for HandsFree banking."""
