"""artreg: local artifact registry.

Names, stores, tags and removes versioned build artifacts on the local
filesystem, and pushes/pulls them to and from remote registries:
  - content-addressed artifact ids derived from each package's seal
  - repositories as tag namespaces; a tag names one artifact at a time
  - reference-counted package files shared across repositories
  - a single JSON index document, replaced atomically under a file lock
"""

__version__ = "0.1.0"
__description__ = "Local artifact registry with push/pull to remote registries"

from artreg.core.registry import LocalRegistry
from artreg.models.names import ArtifactName

__all__ = ["LocalRegistry", "ArtifactName", "__version__"]
