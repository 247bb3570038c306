"""Bridge layer between the local registry and remote registries.

Modules
-------
remote
    ``RemoteRegistry`` uploads and downloads artifact packages and seals
    over HTTP(S) using ``httpx``.  Only ``push`` and ``pull`` touch it; the
    rest of the registry never goes over the network.
"""
