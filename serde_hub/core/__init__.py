"""Core conversion engine: schemas, type classification and dispatch.

WHY: The core holds everything that is independent of any wire format:
record and enum schemas, the rules for Optional, variants, sequences and
maps, and the single dispatcher every value passes through. Backends
plug into it; it never imports them (api.py is the one exception, as the
entry point that resolves a backend by name).

HOW: classify.py decides what kind of type a target is, schema.py holds
record and enum descriptors, containers.py implements the generic
container rules, dispatch.py routes each value to the right rule, and
api.py wraps the whole pipeline in a Result.

RULES:
- Schemas are built once and never mutated
- Only api.py turns exceptions into Results
"""
