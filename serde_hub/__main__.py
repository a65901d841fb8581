"""Package entry point for ``python -m serde_hub``.

WHY: Users run the converter as ``python -m serde_hub config.yaml``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.

RULES:
- This file must exist for ``python -m serde_hub`` to work
"""

if __name__ == "__main__":
    from serde_hub.cli import main
    main()
