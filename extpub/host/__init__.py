"""Host-side plugins the publishing policy builds on.

These model the third-party plugins of a JVM build: Maven publishing and its
metadata helpers, the Nexus staging lifecycle, signing and lifecycle tasks.
Remote calls and cryptography are simulated.
"""
