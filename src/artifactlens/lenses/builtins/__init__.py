"""Lenses shipped with artifactlens.

Each module is loaded by file path during discovery; see
``artifactlens.lenses.registry.load_builtins``.
"""
