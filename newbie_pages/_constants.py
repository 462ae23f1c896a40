"""Common literal values used across newbie_pages.

These constants keep filenames, request headers, and WordPress field names
centralized so the client, generators, and tests can import the same values
without drifting. Intended for internal use within the newbie_pages package.

Examples
--------
>>> from newbie_pages import _constants
>>> _constants.MANIFEST_TEMPLATE.format(key="posts")
'.newbie-pages-posts-manifest.json'
>>> _constants.DISCLOSURE_TAGS
frozenset({'details'})
"""

MANIFEST_TEMPLATE = ".newbie-pages-{key}-manifest.json"
USER_AGENT = "newbie-pages WordPress Client"
POSTS_DIR = "posts"
TAGS_DIR = "tags"
PAGES_DIR = "pages"
HOME_POST_COUNT = 6
HOME_TAG_COUNT = 9
DISCLOSURE_TAGS = frozenset({"details"})
HEADING_LEVELS = {"h2": 2, "h3": 3}
