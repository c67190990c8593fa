"""maxdir - Directory quota enforcement for glftpd sections.

Keeps the number of release directories in each configured section
below a limit by deleting the oldest ones or moving them into a
per-section archive.
"""

__version__ = "2.4.0"
