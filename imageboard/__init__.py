"""
Image board backend core.

Job execution and authorization framework: declarative argument
requirements, rank/privilege checks, transactional execution and a
buffered audit log.
"""

__version__ = "1.0.0"
