"""
Configuration constants to replace magic strings throughout esmify
"""


# Module resolution constants
SOURCE_FILE_EXTENSION = ".js"
JSON_FILE_EXTENSION = ".json"
INDEX_BASENAME = "index"
RELATIVE_PREFIX = "."
SCOPED_PACKAGE_PREFIX = "@"

# Legacy module-system names
REQUIRE_FUNCTION = "require"
MODULE_OBJECT = "module"
EXPORTS_NAME = "exports"
DIRNAME_GLOBAL = "__dirname"
FILENAME_GLOBAL = "__filename"

# Modules used for __dirname / __filename replacement
PATH_MODULE = "path"
URL_MODULE = "url"
PATH_MODULE_ALIASES = ("path", "node:path")
URL_MODULE_ALIASES = ("url", "node:url")
FILE_URL_TO_PATH = "fileURLToPath"

# Prefix used for synthesized temporaries and collision renames
TEMP_NAME_PREFIX = "_"

# Fallback binding name when a specifier has no usable base name
FALLBACK_MODULE_NAME = "module"

# Rendering constants
STRING_QUOTE_CHAR = "'"
JSON_IMPORT_ATTRIBUTES = (("type", "json"),)

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"

# Batch discovery constants
DEFAULT_EXTENSIONS = ("js",)
IGNORED_DIRECTORIES = frozenset({"node_modules", ".git", ".hg", ".svn"})

# Debug dump constants
DUMP_TREE_PER_PASS_ENV = "ESMIFY_DUMP_TREE_PER_PASS"
DUMP_DIR_ENV = "ESMIFY_DUMP_DIR"
DEFAULT_DUMP_DIR = "tree_dumps"

# Colour control (NO_COLOR is the cross-tool convention)
COLOR_ENV = "ESMIFY_COLOR"
NO_COLOR_ENV = "NO_COLOR"
