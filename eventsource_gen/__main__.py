"""Entry point: python -m eventsource_gen

Reads the annotated OpenAPI document and writes the EventSource client module.
"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
