"""Version information for DupSeeker."""

__version__ = "0.3.0"
__author__ = "DupSeeker developers"
__email__ = "dupseeker@users.noreply.github.com"
__license__ = "GPL-2.0"
__description__ = "Duplicate and optical-duplicate marking for aligned sequencing reads"
