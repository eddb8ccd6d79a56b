"""Domain layer (pure logic).

- Keep pet rules and world code generation here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no Ollama calls.
- Prefer deterministic functions (time/random passed in as arguments if needed).
"""
