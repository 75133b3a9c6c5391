"""
Constants
Fixed values for the Orange Factor triage run: threshold, lookback, bot identity,
Bugzilla query scope and the comment markers the extractor looks for.
"""
THRESHOLD = 20
DAYS_BACK = 7
AUTHOR_FILTER = "orangefactor@bots.tld"

# Bugzilla reports this address for bugs without an owner
UNASSIGNED = "nobody@mozilla.org"
NEEDINFO_FLAG = "needinfo"

PRODUCT = "Testing"
COMPONENTS = ["AWSY", "mozperftest", "Performance", "Raptor", "Talos"]
PERMA_MARKER = "Perma"

REPOSITORY_MARKER = "## Repository breakdown:"
TABLE_MARKER = "## Table"
SECTION_PREFIX = "## "

# Case-sensitive substrings identifying a platform line
PLATFORM_KEYWORDS = ("android", "linux", "macos", "win")
TABLE_CELL_SEPARATOR = "|"
BULLET = "*"

DATE_FORMAT = "%Y-%m-%d"
