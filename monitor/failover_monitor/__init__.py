"""
Failover Monitor - archiver registry for replicated formations.

The monitor keeps track of the nodes that take part in a formation. This
package holds the archiver registry: the persistent table of archiver
nodes, the sequence their ids come from, and the adapter that turns an
archiver record into the row shape the query layer expects.

Layout:
    metadata/    archiver store (SQLite) and row shaping
    errors.py    registry error taxonomy
    config.py    settings loaded from MONITOR_* environment variables
    main.py      logging setup and entry point
    tools/       offline administration CLI

Invariants:
    - Archiver ids are unique and never reused
    - Default archiver names are derived from the id actually assigned
    - The registry holds no in-process state between calls

How to change safely:
    - The orchestration layer owns retries; do not add them here
    - Keep error codes stable, callers dispatch on them
"""

from ._version import __version__

__all__ = ["__version__"]
