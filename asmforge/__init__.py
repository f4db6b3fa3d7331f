"""asmforge: publicize, fingerprint and publish game assemblies.

Turns the managed assemblies of an installed game into modding-ready
reference assemblies, records their SHA-256 fingerprints in a change ledger,
and only when something actually changed drives a versioned publish
(commit, ``assemblies-v<version>`` tag, push).

Duplicate publishes are prevented by checking the remote for the version
tag before any artifact work starts.
"""

__version__ = "0.2.0"
__description__ = "Publicize, fingerprint and publish game assemblies for mod development"

from asmforge.core.orchestrator import AssemblyPipeline
from asmforge.cli.app import app as cli

__all__ = ["AssemblyPipeline", "cli", "__version__"]
