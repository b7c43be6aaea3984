"""Repository layout constants.

Every persisted record lives under one of these keys in the backing
``KVStore``. With the ``Files`` backend they are also the file paths
relative to the repository directory.
"""

MINIGIT_DIR = ".minigit"
OBJECTS_PREFIX = "objects/"
HEADS_PREFIX = "refs/heads/"
HEAD_KEY = "HEAD"
INDEX_KEY = "index"
SYMBOLIC_PREFIX = "ref: "
DEFAULT_BRANCH = "main"

OBJECT_KEY = OBJECTS_PREFIX + "%s"
BRANCH_KEY = HEADS_PREFIX + "%s"
