"""Contratos del Core.

- `SourceAdapter`: lo que cada fuente NASA implementa (build/fetch/normalize).
"""
