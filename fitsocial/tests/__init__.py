import os

# Tests always run against SQLite and the in-memory token verifier.
os.environ["FITSOCIAL_USE_IN_MEMORY_BACKENDS"] = "1"
