"""
Blog service constants
"""

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 6
MAX_PAGE_SIZE = 50

# Excerpts are cut at this many characters of plain text
EXCERPT_LENGTH = 200
EXCERPT_ELLIPSIS = "..."

# Slugs get "-NNNN" appended, NNNN = unix seconds mod 10000
SLUG_SUFFIX_MODULUS = 10000
SLUG_FALLBACK = "post"

# Column sizes (blog_posts table)
TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 255
SLUG_MAX_LENGTH = 255
CONTENT_MIN_LENGTH = 100
EXCERPT_MAX_LENGTH = 500
AUTHOR_MAX_LENGTH = 100
TAGS_MAX_LENGTH = 500
CATEGORY_MAX_LENGTH = 100

TAG_SEPARATOR = ","

# OFFSET is a signed 64-bit integer in PostgreSQL and SQLite
MAX_OFFSET = 2**63 - 1
