"""SiteSpine build reporters.

Example:
    >>> from sitespine.reporter import RichBuildReporter, SimpleBuildReporter
    >>>
    >>> # Rich table on the terminal
    >>> reporter = RichBuildReporter()
    >>>
    >>> # Plain logging output
    >>> reporter = SimpleBuildReporter()
"""

from sitespine.reporter.rich import RichBuildReporter
from sitespine.reporter.simple import SimpleBuildReporter

__all__ = [
    "RichBuildReporter",
    "SimpleBuildReporter",
]
