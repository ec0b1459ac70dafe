"""
skillsync

Installs and updates a personal skills directory from a GitHub fork while
keeping private, local-only skills out of harm's way.
"""

__version__ = "0.1.0"
__author__ = "skillsync contributors"
__description__ = "Fork-aware installer and updater for a personal skills directory"
