"""Consumer that re-exports whichever hash_pop suits the interpreter (fixture)."""

from versiongate import reexport

reexport(__name__, "if", "ge", "3.0", "hashpop_modern", "else", "hashpop_legacy")
